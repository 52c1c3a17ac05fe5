"""Filename Rules — pure helpers for naming and resolving stored image files.

Invariants:
    - sanitize_filename output matches ^[a-z0-9_]*$ (may be empty)
    - is_safe_relative_path rejects any path containing ".." or starting with "/"
    - Folder names for uploads are restricted to [a-z0-9_-]
"""

import hashlib
import re

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_FOLDER = re.compile(r"^[a-z0-9_-]{1,64}$")

CACHE_CONTROL_IMMUTABLE = "public, max-age=31536000, immutable"

_CONTENT_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
}


def sanitize_filename(name: str) -> str:
    """Lowercase, collapse non-alphanumeric runs to "_", trim underscores."""
    return _NON_ALNUM.sub("_", name.lower()).strip("_")


def split_extension(filename: str) -> tuple[str, str]:
    """Split "Photo.PNG" into ("photo", ".png"); extension may be empty."""
    lowered = filename.lower()
    stem, dot, ext = lowered.rpartition(".")
    if not dot or not stem:
        return lowered, ""
    return stem, f".{ext}"


def build_upload_filename(original_name: str, timestamp_ms: int) -> str:
    """<sanitized-stem>-<timestamp><ext>, e.g. my_photo-1700000000000.png."""
    stem, ext = split_extension(original_name)
    return f"{sanitize_filename(stem) or 'file'}-{timestamp_ms}{ext}"


def build_generated_filename(title: str | None, timestamp_ms: int, fmt: str) -> str:
    """Filename for a generated solution image; falls back to "solution"."""
    base = sanitize_filename(title) if title else ""
    return f"{base or 'solution'}-{timestamp_ms}.{fmt}"


def build_event_image_filename(prompt: str) -> str:
    """Stable per-prompt filename: event-<md5[:8]>.png."""
    digest = hashlib.md5(prompt.encode("utf-8")).hexdigest()[:8]
    return f"event-{digest}.png"


def is_valid_folder(folder: str) -> bool:
    return bool(_FOLDER.match(folder))


def is_safe_relative_path(path: str) -> bool:
    if not path or ".." in path or path.startswith("/") or "\\" in path:
        return False
    return True


def content_type_for(path: str) -> str:
    ext = path.rsplit(".", 1)[-1].lower() if "." in path else ""
    return _CONTENT_TYPES.get(ext, "application/octet-stream")
