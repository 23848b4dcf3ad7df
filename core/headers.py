"""Header translation between the inbound and outbound legs."""

import re
from collections.abc import Iterable

from core.request_types import HeaderList, TranslatedHeaders

SALT_PREFIX = "salt-"
TARGET_HEADER = "Salt-Host"

# Recomputed by the serving layer from the relayed body.
SKIPPED_RESPONSE_HEADERS = frozenset({"transfer-encoding", "content-length", "connection"})

_TOKEN_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")
_VALUE_RE = re.compile(r"[\t\x20-\x7e\x80-\xff]*")
_VISIBLE_ASCII_RE = re.compile(r"[\t\x20-\x7e]*")


def is_valid_header_name(name: str) -> bool:
    return _TOKEN_RE.fullmatch(name) is not None


def is_valid_header_value(value: str) -> bool:
    return _VALUE_RE.fullmatch(value) is not None


def find_target_host(headers: Iterable[tuple[str, str]]) -> str | None:
    """Return the first Salt-Host value, or None if absent or not visible ASCII."""
    target = TARGET_HEADER.lower()
    for key, value in headers:
        if key.lower() == target:
            if _VISIBLE_ASCII_RE.fullmatch(value) is None:
                return None
            return value
    return None


class HeaderBuilder:
    """Build outbound and relayed header sets."""

    def build_outbound_headers(self, headers: Iterable[tuple[str, str]]) -> TranslatedHeaders:
        """Forward Salt-* headers (except Salt-Host) with the prefix stripped."""
        target = TARGET_HEADER.lower()
        outbound: HeaderList = []
        skipped: list[str] = []
        for key, value in headers:
            key_lower = key.lower()
            if not key_lower.startswith(SALT_PREFIX) or key_lower == target:
                continue
            name = key[len(SALT_PREFIX):]
            if is_valid_header_name(name) and is_valid_header_value(value):
                outbound.append((name, value))
            else:
                skipped.append(key)
        return TranslatedHeaders(outbound, skipped)

    def build_response_headers(self, headers: Iterable[tuple[str, str]]) -> TranslatedHeaders:
        """Copy response headers, dropping the framing ones."""
        relayed: HeaderList = []
        skipped: list[str] = []
        for key, value in headers:
            if key.lower() in SKIPPED_RESPONSE_HEADERS:
                continue
            if is_valid_header_name(key) and is_valid_header_value(value):
                relayed.append((key, value))
            else:
                skipped.append(key)
        return TranslatedHeaders(relayed, skipped)
