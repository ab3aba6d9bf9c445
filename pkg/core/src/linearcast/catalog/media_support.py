"""
Path helpers and browser-playback heuristics for media files.
"""

from __future__ import annotations

import posixpath
from pathlib import PurePosixPath

ALLOWED_EXTENSIONS: frozenset[str] = frozenset({".mp4", ".mkv", ".mov", ".avi", ".m4v", ".webm"})

_HEVC_HINTS = ("x265", "hevc", "h265", "h.265")
_AVC_HINTS = ("x264", "h264", "h.264", "avc")


def normalize_rel_path(rel: str) -> str:
    """Normalize a catalog-relative path; leading ``..`` segments are dropped."""
    cleaned = posixpath.normpath(rel.replace("\\", "/")).lstrip("/")
    while cleaned == ".." or cleaned.startswith("../"):
        cleaned = cleaned[3:] if cleaned.startswith("../") else ""
    return "" if cleaned == "." else cleaned


def title_from_path(rel_path: str) -> str:
    """Display title derived from a file name: ``shows/Pilot.mp4`` -> ``Pilot``."""
    return PurePosixPath(rel_path).stem


def format_from_path(rel_path: str) -> str:
    suffix = PurePosixPath(rel_path).suffix.lower().lstrip(".")
    return suffix or "unknown"


def is_allowed_extension(rel_path: str) -> bool:
    return PurePosixPath(rel_path).suffix.lower() in ALLOWED_EXTENSIONS


def is_probably_browser_supported(rel_path: str, video_codec: str | None = None) -> bool:
    """Guess whether a browser ``<video>`` element can play the file.

    The probed codec wins; file-name hints (``x265``, ``h264``...) are only
    consulted when no codec is known. HEVC is treated as unsupported, legacy
    AVI codecs likewise unless the file is H.264.
    """
    ext = PurePosixPath(rel_path).suffix.lower()
    name = rel_path.lower()
    codec = (video_codec or "").lower()

    video_is_hevc = any(h in codec for h in ("hevc", "h265", "h.265"))
    video_is_avc = "h264" in codec or "avc" in codec
    video_is_vp = "vp8" in codec or "vp9" in codec

    hevc_likely = video_is_hevc or (not codec and any(h in name for h in _HEVC_HINTS))
    avc_likely = video_is_avc or (not codec and any(h in name for h in _AVC_HINTS))

    if ext in (".mp4", ".m4v", ".mov", ".webm"):
        if video_is_avc or video_is_vp:
            return True
        return not hevc_likely
    if ext == ".mkv":
        return not hevc_likely
    if ext == ".avi":
        return avc_likely
    return False


_CONTENT_TYPES = {
    ".mp4": "video/mp4",
    ".m4v": "video/mp4",
    ".webm": "video/webm",
    ".mkv": "video/x-matroska",
    ".mov": "video/quicktime",
    ".avi": "video/x-msvideo",
}


def content_type_for_path(rel_path: str) -> str:
    return _CONTENT_TYPES.get(PurePosixPath(rel_path).suffix.lower(), "application/octet-stream")
