"""Public download URLs for files under the content root."""

from __future__ import annotations

from pathlib import PurePosixPath
from urllib.parse import quote

from .config import ConfigError

# Characters left unescaped in a path segment. Published feed URLs already
# use this set, so changing it would change every episode URL.
_SEGMENT_SAFE = "!'()*"


def resolve_url(share_url: str, relative_path: str, encode: bool = True) -> str:
    """Map a root-relative path to its public download URL.

    Each path segment is percent-encoded on its own and the segments are
    joined with a literal ``/``, so the separators are never encoded. An
    empty or ``.`` directory part is dropped.

    >>> resolve_url("https://cloud.example.com/share", "My Show/items/01 Intro.mp3")
    'https://cloud.example.com/share/My%20Show/items/01%20Intro.mp3'
    >>> resolve_url("https://cloud.example.com/share/", "./feed_urls.txt")
    'https://cloud.example.com/share/feed_urls.txt'
    """
    base = (share_url or "").rstrip("/")
    if not base:
        raise ConfigError("Public share URL is not set.")
    segments = [
        part
        for part in PurePosixPath(relative_path.replace("\\", "/")).parts
        if part not in ("", ".", "/")
    ]
    if encode:
        segments = [quote(part, safe=_SEGMENT_SAFE) for part in segments]
    return "/".join([base, *segments])
