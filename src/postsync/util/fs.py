"""Static asset staging into the output tree"""

import logging
import shutil
from pathlib import Path


logger = logging.getLogger(__name__)


def stage_assets(public_dir: Path, dist_dir: Path) -> int:
    """Replace dist_dir with a copy of public_dir. Returns the number of files copied.

    A missing public_dir leaves an empty dist_dir.
    """
    if dist_dir.is_dir():
        logger.debug("deleting output directory %s", dist_dir)
        shutil.rmtree(dist_dir)

    if not public_dir.is_dir():
        dist_dir.mkdir(parents=True, exist_ok=True)
        return 0

    shutil.copytree(public_dir, dist_dir)
    copied = sum(1 for p in dist_dir.rglob('*') if p.is_file())
    logger.debug("copied %d static file(s) from %s to %s", copied, public_dir, dist_dir)
    return copied
