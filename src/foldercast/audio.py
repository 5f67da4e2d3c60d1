"""Audio file recognition and duration probing."""

from __future__ import annotations

import mimetypes
from pathlib import Path

from mutagen import File as MutagenFile
from mutagen import MutagenError

AUDIO_EXTS = {".mp3", ".m4a", ".aac", ".ogg", ".opus", ".flac", ".wav"}
IMAGE_EXTS = (".jpg", ".png")

_CONTENT_TYPES = {
    ".mp3": "audio/mpeg",
    ".m4a": "audio/mp4",
    ".aac": "audio/aac",
    ".ogg": "audio/ogg",
    ".opus": "audio/ogg",
    ".flac": "audio/flac",
    ".wav": "audio/wav",
}


class AudioProbeError(Exception):
    """Raised when an audio file's duration cannot be determined."""


def is_audio_name(name: str) -> bool:
    return Path(name).suffix.lower() in AUDIO_EXTS and not name.startswith(".")


def content_type(name: str) -> str:
    suffix = Path(name).suffix.lower()
    if suffix in _CONTENT_TYPES:
        return _CONTENT_TYPES[suffix]
    guessed, _ = mimetypes.guess_type(name)
    return guessed or "audio/mpeg"


def probe_duration_ms(path: Path) -> int:
    """Return the playing time of *path* in whole milliseconds."""
    try:
        audio = MutagenFile(path)
    except (MutagenError, OSError) as exc:
        raise AudioProbeError(f"{path.name}: {exc}") from exc
    if audio is None or getattr(audio, "info", None) is None:
        raise AudioProbeError(f"{path.name}: not a recognised audio file")
    length = getattr(audio.info, "length", None)
    if not length or length < 0:
        raise AudioProbeError(f"{path.name}: no duration in stream info")
    return int(round(length * 1000))
