"""Outbound URL construction from the Salt-Host header."""

DEFAULT_SCHEME = "https://"
_KNOWN_SCHEMES = ("http://", "https://")


def build_target_url(target_host: str, path: str, query: str = "") -> str:
    """Join Salt-Host, the inbound path and the inbound query string.

    A value without an explicit http:// or https:// origin gets https://.
    """
    if target_host.startswith(_KNOWN_SCHEMES):
        url = f"{target_host}{path}"
    else:
        url = f"{DEFAULT_SCHEME}{target_host}{path}"
    if query:
        url = f"{url}?{query}"
    return url
