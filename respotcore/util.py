"""Small helpers shared across the package."""

from __future__ import annotations

import logging
import os
import secrets
import subprocess
import time
from collections.abc import Iterator

logger = logging.getLogger(__name__)


def rand_vec(size: int) -> bytes:
    """Return ``size`` cryptographically random bytes."""
    return secrets.token_bytes(size)


def now_ms() -> int:
    """Current wall-clock time in milliseconds since the Unix epoch."""
    return time.time_ns() // 1_000_000


def mkdir_existing(path: str | os.PathLike) -> None:
    """Create a directory, treating an existing one as success."""
    try:
        os.mkdir(path)
    except FileExistsError:
        pass


def run_program(program: str) -> int:
    """Run a whitespace-separated command line and return its exit status."""
    logger.info("Running %s", program)
    argv = program.split()
    if not argv:
        raise ValueError("empty program command line")
    completed = subprocess.run(argv, check=False)
    logger.info("Exit status: %s", completed.returncode)
    return completed.returncode


def powm(base: int, exp: int, modulus: int) -> int:
    """Modular exponentiation by repeated squaring."""
    if exp == 0:
        return 1
    return pow(base, exp, modulus)


def str_chunks(data: str, size: int) -> Iterator[str]:
    """Yield consecutive slices of ``data`` that are exactly ``size`` long."""
    if size <= 0:
        raise ValueError("chunk size must be positive")
    rest = data
    while rest:
        if len(rest) < size:
            raise ValueError(f"trailing chunk {rest!r} is shorter than {size}")
        yield rest[:size]
        rest = rest[size:]


class SeqGenerator:
    """Hands out consecutive sequence numbers."""

    def __init__(self, value: int = 0) -> None:
        self._value = value

    def get(self) -> int:
        """Return the current value and advance to the next."""
        value = self._value
        self._value = value + 1
        return value