"""
StaticMediaCatalog: loads a JSON media index and answers duration lookups
for the resolvers.

Usage:
    from linearcast.catalog.static_media_catalog import StaticMediaCatalog
    catalog = StaticMediaCatalog.from_file("data/local/media-index.json")
    entry = catalog.get("shows/pilot.mp4")

Durations are measured elsewhere (ffprobe, remote index); this module never
opens media files.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping, Protocol

from linearcast.catalog.media_support import (
    format_from_path,
    is_probably_browser_supported,
    normalize_rel_path,
    title_from_path,
)
from linearcast.infra.cache import VersionedCache

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogEntry:
    """Measured facts about one media file. Immutable."""

    rel_path: str
    duration_seconds: float | None = None
    format: str = "unknown"
    title: str | None = None
    video_codec: str | None = None
    audio_codec: str | None = None
    supported: bool = True

    @property
    def has_duration(self) -> bool:
        return self.duration_seconds is not None and self.duration_seconds > 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CatalogEntry:
        rel_path = normalize_rel_path(str(data["relPath"]))
        raw_duration = data.get("durationSeconds")
        try:
            duration = float(raw_duration) if raw_duration is not None else None
        except (TypeError, ValueError):
            duration = None
        video_codec = data.get("videoCodec")
        supported = data.get("supported")
        return cls(
            rel_path=rel_path,
            duration_seconds=duration if duration and duration > 0 else None,
            format=data.get("format") or format_from_path(rel_path),
            title=data.get("title") or None,
            video_codec=video_codec,
            audio_codec=data.get("audioCodec"),
            supported=bool(supported) if supported is not None
            else is_probably_browser_supported(rel_path, video_codec),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "relPath": self.rel_path,
            "durationSeconds": self.duration_seconds,
            "format": self.format,
            "title": self.title or title_from_path(self.rel_path),
            "videoCodec": self.video_codec,
            "audioCodec": self.audio_codec,
            "supported": self.supported,
        }


class MediaCatalog(Protocol):
    """Protocol for looking up media facts by catalog-relative path."""

    def get(self, rel_path: str) -> CatalogEntry | None:
        """Return the entry for ``rel_path`` (normalized), or None if unknown."""
        ...


class StaticMediaCatalog:
    """Read-only MediaCatalog backed by an in-memory mapping."""

    def __init__(self, entries: Iterable[CatalogEntry] = ()) -> None:
        self._entries: dict[str, CatalogEntry] = {}
        for entry in entries:
            self._entries[entry.rel_path] = entry

    @classmethod
    def from_durations(cls, durations: Mapping[str, float | None]) -> StaticMediaCatalog:
        """Convenience constructor: ``{"a.mp4": 600}``."""
        return cls(
            CatalogEntry(
                rel_path=normalize_rel_path(path),
                duration_seconds=dur if dur and dur > 0 else None,
                format=format_from_path(path),
            )
            for path, dur in durations.items()
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> StaticMediaCatalog:
        entries = []
        for item in data.get("items", []):
            if not isinstance(item, Mapping) or not isinstance(item.get("relPath"), str):
                _logger.warning("Skipping media index item without relPath: %r", item)
                continue
            entries.append(CatalogEntry.from_dict(item))
        return cls(entries)

    @classmethod
    def from_file(
        cls,
        index_path: str | Path,
        cache: VersionedCache[StaticMediaCatalog] | None = None,
    ) -> StaticMediaCatalog:
        """Load ``media-index.json``. A missing file is an empty catalog.

        When ``cache`` is given the parsed catalog is reused until the file's
        modification time changes.
        """
        index_path = Path(index_path)
        try:
            version = index_path.stat().st_mtime_ns
        except FileNotFoundError:
            _logger.warning("Media index not found: %s", index_path)
            return cls()

        if cache is not None:
            cached = cache.get(str(index_path), version)
            if cached is not None:
                return cached

        with open(index_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        catalog = cls.from_dict(data)
        _logger.info("Loaded %d media index entries from %s", len(catalog), index_path)

        if cache is not None:
            cache.set(str(index_path), version, catalog)
        return catalog

    def get(self, rel_path: str) -> CatalogEntry | None:
        return self._entries.get(normalize_rel_path(rel_path))

    def __contains__(self, rel_path: object) -> bool:
        return isinstance(rel_path, str) and self.get(rel_path) is not None

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)
