"""
Media file serving.

Files are served from ``MEDIA_ROOT`` only: paths are normalized, must stay
inside the root and must carry a playable video extension.
"""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse

from linearcast.catalog.media_support import content_type_for_path, is_allowed_extension, normalize_rel_path
from linearcast.infra.exceptions import ResourceError, ValidationError
from linearcast.infra.settings import Settings
from linearcast.web.api.deps import get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["media"])


def resolve_media_path(media_root: str | Path, rel_path: str) -> Path:
    """
    Map a catalog-relative path to a file under ``media_root``.

    Raises:
        ValidationError: If the path is empty, escapes the root or has a disallowed extension
        ResourceError: If the file does not exist
    """
    rel = normalize_rel_path(rel_path)
    if not rel:
        raise ValidationError("file query param is required")
    if not is_allowed_extension(rel):
        raise ValidationError(f"Unsupported media type: {rel}")

    root = Path(media_root).resolve()
    candidate = (root / rel).resolve()
    if candidate != root and root not in candidate.parents:
        raise ValidationError(f"Path escapes media root: {rel_path}")
    if not candidate.is_file():
        raise ResourceError(f"Media file not found: {rel}")
    return candidate


@router.get("/media")
def get_media(
    file: str = Query(..., description="Path relative to the media root"),
    settings: Settings = Depends(get_settings),
) -> FileResponse:
    """Stream a media file. Range requests are handled by the response class."""
    path = resolve_media_path(settings.media_root, file)
    logger.debug("Serving media %s", path)
    return FileResponse(path, media_type=content_type_for_path(path.name))
