# respotcore

Core pieces of a streaming music client, kept as a plain Python library.

## What is inside

- `respotcore.spotify_id`: `SpotifyId` (128-bit track/album/artist ids in
  base16, base62 and raw bytes) and `FileId` (20-byte file ids).
- `respotcore.util`: `powm`, `str_chunks`, `SeqGenerator`, `mkdir_existing`,
  `now_ms`, `rand_vec` and `run_program`.
- `respotcore.subfile`: `Subfile`, a view of a seekable stream starting at an offset.
- `respotcore.config`: `SessionConfig`, `PlayerConfig`, `ConnectConfig`,
  `Bitrate`, `DeviceType` and `version_string`.
- `respotcore.diffie_hellman`: `DHLocalKeys` for the key exchange.
- `respotcore.keys`: `compute_keys`, deriving the challenge and the send and
  receive keys from a shared secret and the handshake transcript.
- `respotcore.authentication`: `Credentials` (password, encrypted blob, JSON
  files) and `get_credentials`.
- `respotcore.cache`: `Cache` for stored credentials and audio files.
- `respotcore.decrypt`: `AudioDecrypt`, a seekable AES-CTR decrypting reader.
- `respotcore.apresolve`: `apresolve`, `apresolve_or_fallback`, `parse_apresolve`.
- `respotcore.channel`: `ChannelManager` and `Channel`, with `HeaderEvent`,
  `DataEvent` and `ChannelError`.
- `respotcore.audio_key`: `AudioKeyManager`, whose `request` returns a
  `concurrent.futures.Future` resolving to a 16-byte key.
- `respotcore.session`: `Session`, which routes incoming packets to the
  channel and audio key managers, and `device_id`.
- `respotcore.metadata`: `Restriction`, `countrylist_contains`,
  `parse_restrictions` and `request_cover`.
- `respotcore.fetch`: `AudioFile`, chunked download of audio files, plus
  `request_chunk` and `chunk_request_packet`.

## Install

    pip install .

For running the tests:

    pip install ".[test]"
    pytest

## Examples

Converting identifiers:

    from respotcore.spotify_id import SpotifyId

    track = SpotifyId.from_base62("4uLU6hMCjMI75M1A2tKUQC")
    print(track.to_base16())
    assert SpotifyId.from_raw(track.to_raw()) == track

Saving and loading credentials:

    from respotcore.authentication import Credentials

    password = "password"
    creds = Credentials.with_password("user", password)
    creds.save_to_file("credentials.json")
    assert Credentials.from_file("credentials.json").username == "user"

Deriving session keys after a key exchange:

    from respotcore.diffie_hellman import DHLocalKeys
    from respotcore.keys import compute_keys

    ours = DHLocalKeys.random(None)
    theirs = DHLocalKeys.random(None)
    shared = ours.shared_secret(theirs.public_key())
    challenge, send_key, recv_key = compute_keys(shared, b"packets")

Reading decrypted audio:

    import io
    from respotcore.decrypt import AudioDecrypt

    reader = AudioDecrypt(bytes(16), io.BytesIO(encrypted_bytes))
    reader.seek(1000, 0)
    data = reader.read(4096)

Driving a session by hand:

    from respotcore.config import SessionConfig
    from respotcore.session import Session

    sent = []
    session = Session(SessionConfig(), lambda cmd, data: sent.append((cmd, data)))
    session.dispatch(0x1B, b"SE")
    assert session.country() == "SE"

## What it does not do

- It opens no network connection to an access point: there is no handshake
  transport, no packet encryption codec and no login exchange. A `Session`
  sends packets through the callable it is given and is fed incoming packets
  through `Session.dispatch`.
- Request/response and subscription messages (commands 0xb2 to 0xb6) are
  accepted by `Session.dispatch` and ignored.
- It does not decode Vorbis audio, play sound, or parse track, album and
  artist metadata messages; `respotcore.metadata` covers only the country
  restriction rules and cover image requests.
- It installs no command-line program.