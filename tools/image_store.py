"""Gateway-side blob storage for item photos."""
from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

MIME_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}


def image_name(item_id: int | str, mime_type: str) -> str:
    """Blob name for an item photo; unknown types fall back to ``jpg``."""

    return f"{item_id}.{MIME_EXTENSIONS.get(mime_type, 'jpg')}"


class ImageStore:
    """Interface for storing item photos and resolving their public URLs."""

    def save(self, name: str, data: bytes) -> str:
        """Store the blob and return its path relative to the public root."""

        raise NotImplementedError

    def delete(self, name: str) -> None:
        raise NotImplementedError


class LocalImageStore(ImageStore):
    """Writes photos to a directory the gateway serves under ``/images``."""

    def __init__(self, base_dir: str | Path = "data/images") -> None:
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def save(self, name: str, data: bytes) -> str:
        path = self.base_dir / name
        if path.exists():
            raise FileExistsError(f"Image {name} already exists")
        path.write_bytes(data)
        return f"images/{name}"

    def delete(self, name: str) -> None:
        """Best-effort removal; a missing or locked file is only logged."""

        try:
            (self.base_dir / name).unlink()
        except FileNotFoundError:
            logger.warning("Image already absent", extra={"blob": name})
        except OSError as exc:
            logger.warning("Failed to delete image", extra={"blob": name, "error": str(exc)})


__all__ = ["ImageStore", "LocalImageStore", "MIME_EXTENSIONS", "image_name"]
