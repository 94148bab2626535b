"""Helpers for image files on disk: extension matching and capture dates.

Nothing here ever writes to an image file.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_EXTENSIONS = ("png", "jpg", "jpeg", "gif", "bmp")

# EXIF tag ids
_EXIF_IFD = 0x8769
_DATETIME_ORIGINAL = 36867
_DATETIME = 306


def image_name_pattern(extensions: Iterable[str] = DEFAULT_IMAGE_EXTENSIONS) -> re.Pattern:
    """Case-insensitive pattern matching basenames like ``*.(png|jpg|...)``."""
    exts = [re.escape(e.strip().lower().lstrip(".")) for e in extensions if e and e.strip()]
    return re.compile(r".*\.(" + "|".join(exts) + r")$", re.IGNORECASE)


def iter_image_files(folder: Path, extensions: Iterable[str] = DEFAULT_IMAGE_EXTENSIONS) -> Iterable[Path]:
    """Yield regular files directly inside ``folder`` whose names match, sorted by name.

    A missing or unreadable folder yields nothing.
    """
    folder = Path(folder)
    if not folder.is_dir():
        return
    pattern = image_name_pattern(extensions)
    try:
        entries = sorted(folder.iterdir(), key=lambda p: p.name)
    except OSError:
        logger.warning("cannot list %s, treating it as empty", folder, exc_info=True)
        return
    for p in entries:
        try:
            if p.is_file() and pattern.match(p.name):
                yield p
        except (OSError, PermissionError):
            # Skip files we can't access
            continue


def modified_time(path: str | Path) -> datetime:
    """Last-modified time of ``path`` as a naive local datetime."""
    return datetime.fromtimestamp(Path(path).stat().st_mtime)


def _parse_exif_date(val) -> Optional[datetime]:
    if not val or not isinstance(val, str):
        return None
    s = val.strip().rstrip("\x00")
    for fmt in ("%Y:%m:%d %H:%M:%S", "%Y-%m-%d %H:%M:%S"):
        try:
            return datetime.strptime(s, fmt)
        except ValueError:
            continue
    return None


def exif_date_taken(path: str | Path) -> Optional[datetime]:
    """Read DateTimeOriginal (or DateTime) from the image's EXIF block, if any."""
    try:
        with Image.open(path) as img:
            exif = img.getexif()
            value = exif.get_ifd(_EXIF_IFD).get(_DATETIME_ORIGINAL) or exif.get(_DATETIME)
    except (OSError, UnidentifiedImageError, ValueError):
        return None
    return _parse_exif_date(value)


def read_date_taken(path: str | Path) -> datetime:
    """Capture date of an image: EXIF when present, otherwise the file's mtime.

    Raises:
        FileNotFoundError: if the file does not exist
    """
    taken = exif_date_taken(path)
    if taken is not None:
        return taken
    logger.debug("no EXIF date in %s, using modification time", path)
    return modified_time(path)
