from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from photoalbum.entities import STOCK_ALBUM_NAME, Album, Photo, User
from photoalbum.lib.imagefiles import DEFAULT_IMAGE_EXTENSIONS, iter_image_files, modified_time

logger = logging.getLogger(__name__)


def seed_stock_user(user: User, seed_dir: str | Path,
                    extensions: Iterable[str] = DEFAULT_IMAGE_EXTENSIONS) -> Optional[Album]:
    """Give ``user`` a populated "stock" album unless it already has one.

    Every image directly inside ``seed_dir`` becomes a Photo dated by the
    file's modification time. Returns the new album, or None when nothing
    was done. A missing seed directory just yields an empty album.
    """
    if user.get_album(STOCK_ALBUM_NAME) is not None:
        return None

    album = Album(name=STOCK_ALBUM_NAME)
    seed_dir = Path(seed_dir)
    if not seed_dir.is_dir():
        logger.info("seed directory %s not found; stock album left empty", seed_dir)
    for path in iter_image_files(seed_dir, extensions):
        try:
            taken = modified_time(path)
        except OSError as exc:
            logger.warning("skipping seed image %s: %s", path, exc)
            continue
        album.photos.append(Photo(filepath=str(path.resolve()), date_taken=taken, caption=""))
    user.albums.append(album)
    logger.info("seeded stock album with %d photos from %s", album.photo_count, seed_dir)
    return album
