"""Collect decoded chunks from every region file of an Anvil world.

World structure:
{world}/
    level.dat
    region/
        r.{X}.{Z}.mca  # Region files
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from ..errors import InvalidWorldError, RegionFileUnreadable
from .chunk import Chunk
from .constants import REGION_DIR_NAME, REGION_FILE_SUFFIX
from .region import ChunkDecodeResult, read_region_file

logger = logging.getLogger(__name__)


@dataclass
class RegionSummary:
    """Per-file decode counts."""
    path: Path
    present: int = 0
    loaded: int = 0
    empty: int = 0
    failed: int = 0
    error: Optional[str] = None


@dataclass
class LoadedWorld:
    """All chunks decoded from a world, plus what was skipped.

    Attributes:
        chunks: Non-empty chunks in load order
        regions: One summary per region file
    """
    chunks: List[Chunk] = field(default_factory=list)
    regions: List[RegionSummary] = field(default_factory=list)

    @property
    def skipped_files(self) -> int:
        return sum(1 for region in self.regions if region.error is not None)

    @property
    def failed_chunks(self) -> int:
        return sum(region.failed for region in self.regions)

    @property
    def empty_chunks(self) -> int:
        return sum(region.empty for region in self.regions)


RegionCallback = Callable[[int, int, RegionSummary], None]


def get_region_dir(world_dir: Path) -> Path:
    """Validate a world directory and return its ``region`` directory.

    Raises:
        InvalidWorldError: The world or its region directory is missing,
            or the region directory is empty.
    """
    world_dir = Path(world_dir)
    if not world_dir.exists():
        raise InvalidWorldError(f"World does not exist: {world_dir}")
    if not world_dir.is_dir():
        raise InvalidWorldError(f"World path points to a file, not to a directory: {world_dir}")
    region_dir = world_dir / REGION_DIR_NAME
    if not region_dir.is_dir() or not any(region_dir.iterdir()):
        raise InvalidWorldError(f"World seems to be corrupted (no region files): {world_dir}")
    return region_dir


def find_region_files(region_dir: Path) -> List[Path]:
    """List ``.mca`` files in a region directory, sorted by name."""
    return sorted(
        path for path in Path(region_dir).iterdir()
        if path.is_file() and path.name.endswith(REGION_FILE_SUFFIX)
    )


def _summarize(path: Path, results: Iterable[ChunkDecodeResult], world: LoadedWorld) -> RegionSummary:
    summary = RegionSummary(path=path)
    for result in results:
        summary.present += 1
        if not result.ok:
            summary.failed += 1
            logger.warning("Skipping chunk in %s: %s", path.name, result.error)
        elif result.chunk is None:
            summary.empty += 1
        else:
            summary.loaded += 1
            world.chunks.append(result.chunk)
    return summary


def load_chunks(
    region_files: List[Path],
    parallel: bool = False,
    workers: Optional[int] = None,
    callback: Optional[RegionCallback] = None,
) -> LoadedWorld:
    """Decode every region file, skipping unreadable files and bad chunks.

    Args:
        region_files: Region files to read
        parallel: Decode chunks of each file on a thread pool
        workers: Thread pool size
        callback: Called as ``callback(done, total, summary)`` after each file

    Returns:
        LoadedWorld with every non-empty chunk
    """
    world = LoadedWorld()
    total = len(region_files)
    for done, path in enumerate(region_files, start=1):
        try:
            results = read_region_file(path, parallel=parallel, workers=workers)
        except RegionFileUnreadable as exc:
            logger.warning("Skipping region file: %s", exc)
            summary = RegionSummary(path=path, error=str(exc))
        else:
            summary = _summarize(path, results, world)
            logger.info(
                "Loaded %d chunks from region file '%s' (%d empty, %d failed)",
                summary.loaded, path.name, summary.empty, summary.failed,
            )
        world.regions.append(summary)
        if callback:
            callback(done, total, summary)
    return world


def load_world(
    world_dir: Path,
    parallel: bool = False,
    workers: Optional[int] = None,
    callback: Optional[RegionCallback] = None,
) -> LoadedWorld:
    """Validate a world directory and decode all of its region files."""
    region_dir = get_region_dir(world_dir)
    return load_chunks(find_region_files(region_dir), parallel=parallel, workers=workers, callback=callback)
