"""Static image serving with a permissive CORS header."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

try:
    from fastapi import APIRouter, Depends
    from fastapi.responses import FileResponse
except ImportError:
    raise ImportError("FastAPI is required. Install with: pip install lessonhub")

from lessonhub.server.deps import get_images_dir
from lessonhub.server.responses import PrettyJSONResponse

router = APIRouter(tags=["images"])


def resolve_image(root: Path, requested: str) -> Optional[Path]:
    """Return the file under ``root`` for ``requested``, or None.

    Paths that resolve outside ``root`` are treated as missing.
    """
    candidate = (root / requested).resolve()
    if root not in candidate.parents:
        return None
    return candidate if candidate.is_file() else None


def _not_found() -> PrettyJSONResponse:
    return PrettyJSONResponse(status_code=404, content={"error": "Image not found"})


@router.get("/images")
async def get_image_root():
    return _not_found()


@router.get("/images/{image_path:path}")
async def get_image(image_path: str, root: Path = Depends(get_images_dir)):
    path = resolve_image(root, image_path)
    if path is None:
        return _not_found()
    return FileResponse(path, headers={"Access-Control-Allow-Origin": "*"})
