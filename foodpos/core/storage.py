"""
core/storage.py – ImageStorage class.
Uploaded food images live in one directory, served back under /uploads.
"""
import logging
import shutil
import uuid
from pathlib import Path
from typing import BinaryIO, Optional

from .errors import InvalidInputError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}


class ImageStorage:
    def __init__(self, upload_dir: str | Path) -> None:
        self._dir = Path(upload_dir)

    @property
    def directory(self) -> Path:
        return self._dir

    def save(self, original_name: Optional[str], stream: BinaryIO) -> str:
        """Store the stream under a fresh unique filename and return that name."""
        ext = Path(original_name or "").suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise InvalidInputError("Only image files are allowed (jpg, jpeg, png, gif, webp)")
        self._dir.mkdir(parents=True, exist_ok=True)
        filename = f"{uuid.uuid4().hex}{ext}"
        with open(self._dir / filename, "wb") as out:
            shutil.copyfileobj(stream, out)
        return filename

    def remove(self, filename: Optional[str]) -> bool:
        """Best effort: a missing or undeletable file is logged, never raised."""
        if not filename:
            return False
        path = self._dir / Path(filename).name
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning("Could not remove image %s: %s", path, e)
            return False
