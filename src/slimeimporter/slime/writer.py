"""Atomic persistence of encoded Slime containers."""

import logging
import os
from pathlib import Path

from ..errors import ContainerWriteFailure

logger = logging.getLogger(__name__)


def write_slime_file(path: Path, data: bytes, overwrite: bool = True) -> Path:
    """Write a container next to its destination, then move it into place.

    No partial file is left at ``path`` if the write fails.

    Raises:
        ContainerWriteFailure: The file exists and ``overwrite`` is False,
            or any I/O step fails.
    """
    path = Path(path)
    if path.exists() and not overwrite:
        raise ContainerWriteFailure(path, "file already exists")

    tmp_path = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp_path, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except OSError as exc:
        try:
            tmp_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as cleanup_exc:
            logger.warning("Could not remove %s: %s", tmp_path, cleanup_exc)
        raise ContainerWriteFailure(path, str(exc)) from exc

    logger.debug("Wrote %d bytes to %s", len(data), path)
    return path
