"""Availability rules for catalogue items and cover image requests."""

from __future__ import annotations

import struct
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from respotcore.spotify_id import FileId
from respotcore.util import str_chunks

CMD_IMAGE = 0x19


@dataclass(frozen=True)
class Restriction:
    """Country rules that apply to the listed catalogues."""

    catalogue_str: tuple[str, ...] = ()
    countries_allowed: str | None = None
    countries_forbidden: str | None = None


def countrylist_contains(countries: str, country: str) -> bool:
    """Whether a run of two-letter codes contains ``country``."""
    return any(code == country for code in str_chunks(countries, 2))


def parse_restrictions(restrictions: Iterable[Restriction], country: str, catalogue: str) -> bool:
    """Whether an item is available in ``country`` for ``catalogue``."""
    forbidden = ""
    has_forbidden = False
    allowed = ""
    has_allowed = False

    for restriction in restrictions:
        if catalogue not in restriction.catalogue_str:
            continue
        if restriction.countries_forbidden is not None:
            forbidden += restriction.countries_forbidden
            has_forbidden = True
        if restriction.countries_allowed is not None:
            allowed += restriction.countries_allowed
            has_allowed = True

    return (
        (has_forbidden or has_allowed)
        and (not has_forbidden or not countrylist_contains(forbidden, country))
        and (not has_allowed or countrylist_contains(allowed, country))
    )


def request_cover(session, file_id: FileId) -> Iterator[bytes]:
    """Request a cover image and return an iterator over its data packets."""
    channel_id, channel = session.channel().allocate()
    data = channel.data()
    session.send_packet(CMD_IMAGE, struct.pack(">HH", channel_id, 0) + file_id.data)
    return data