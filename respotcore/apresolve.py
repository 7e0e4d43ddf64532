"""Resolution of the access point to connect to."""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request

logger = logging.getLogger(__name__)

AP_FALLBACK = "ap.spotify.com:80"
APRESOLVE_ENDPOINT = "http://apresolve.spotify.com/"


class APResolveError(Exception):
    """The access point list could not be fetched or understood."""


def parse_apresolve(body: bytes) -> str:
    """Return the first access point from a resolver response body."""
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as err:
        raise APResolveError("invalid UTF8 in response") from err
    try:
        document = json.loads(text)
    except ValueError as err:
        raise APResolveError("invalid JSON") from err
    ap_list = document.get("ap_list") if isinstance(document, dict) else None
    if not isinstance(ap_list, list) or not all(isinstance(ap, str) for ap in ap_list):
        raise APResolveError("invalid JSON")
    if not ap_list:
        raise APResolveError("empty AP List")
    return ap_list[0]


def apresolve(timeout: float | None = 10.0) -> str:
    """Ask the resolver endpoint for an access point."""
    try:
        with urllib.request.urlopen(APRESOLVE_ENDPOINT, timeout=timeout) as response:
            body = response.read()
    except (urllib.error.URLError, OSError) as err:
        raise APResolveError("HTTP error") from err
    return parse_apresolve(body)


def apresolve_or_fallback(timeout: float | None = 10.0) -> str:
    """Resolve an access point, using the fallback address on failure."""
    try:
        return apresolve(timeout)
    except APResolveError as err:
        logger.warning("Failed to resolve Access Point: %s", err)
        logger.warning('Using fallback "%s"', AP_FALLBACK)
        return AP_FALLBACK