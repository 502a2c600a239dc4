"""Local storage for uploaded videos.

WHY: Uploaded videos must be written somewhere the transcription step can
read them and the preview player can fetch them. A single directory
served under /uploads is enough; there is no durable storage layer.

HOW: UploadStore writes each upload as one buffered file named
``{millis}-{sanitized name}`` and maps public ``/uploads/<name>`` paths
back to files on disk.

RULES:
- Filenames keep only [a-zA-Z0-9.-]; everything else becomes "_"
- A millisecond timestamp prefix keeps concurrent uploads apart
- OSError while writing -> StorageError
- Public paths that escape the upload directory -> InvalidInputError
- Missing files -> VideoNotFoundError
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from video_captioner.config import UPLOADS_DIR, UPLOADS_URL_PREFIX
from video_captioner.errors import InvalidInputError, StorageError, VideoNotFoundError

_UNSAFE_CHARS_RE = re.compile(r"[^a-zA-Z0-9.-]")


def sanitize_filename(name: str) -> str:
    """Replace every character outside [a-zA-Z0-9.-] with an underscore."""
    return _UNSAFE_CHARS_RE.sub("_", Path(name).name) or "upload"


@dataclass
class StoredVideo:
    """A video written to the upload directory."""

    filename: str
    path: Path
    size: int

    @property
    def public_url(self) -> str:
        return "{}/{}".format(UPLOADS_URL_PREFIX, self.filename)


class UploadStore:
    """Directory-backed store for uploaded videos."""

    def __init__(self, root: Union[str, Path, None] = None) -> None:
        self.root = Path(root or UPLOADS_DIR)

    def save(
        self,
        filename: str,
        content: bytes,
        timestamp_ms: Optional[int] = None,
    ) -> StoredVideo:
        """Write ``content`` under a unique, sanitized name.

        Raises:
            StorageError: if the directory cannot be created or the file
                cannot be written.
        """
        if timestamp_ms is None:
            timestamp_ms = int(time.time() * 1000)
        stored_name = "{}-{}".format(timestamp_ms, sanitize_filename(filename))
        path = self.root / stored_name

        try:
            self.root.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        except OSError as exc:
            raise StorageError("Failed to upload video", str(exc)) from exc

        return StoredVideo(filename=stored_name, path=path, size=len(content))

    def resolve(self, video_path: str) -> Path:
        """Map a public video path (``/uploads/<name>`` or ``<name>``) to disk.

        Raises:
            InvalidInputError: for empty paths or paths leaving the directory.
            VideoNotFoundError: if the file does not exist.
        """
        if not video_path or not video_path.strip():
            raise InvalidInputError("No video path provided")

        relative = video_path.strip()
        prefix = UPLOADS_URL_PREFIX + "/"
        if relative.startswith(prefix):
            relative = relative[len(prefix):]
        relative = relative.lstrip("/")

        name = Path(relative).name
        if not name or name != relative or name in (".", ".."):
            raise InvalidInputError("Invalid video path: {}".format(video_path))

        path = self.root / name
        if not path.is_file():
            raise VideoNotFoundError("Video file not found at path: {}".format(video_path))
        return path
