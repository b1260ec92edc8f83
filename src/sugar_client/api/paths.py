from __future__ import annotations

from urllib.parse import quote


def build_path(*segments: object) -> str:
    """Join path segments, percent-encoding each one on its own."""
    return "/".join(quote(str(segment), safe="") for segment in segments)
