"""Import pipeline from an Anvil world directory to a Slime file."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Callable
import logging
import time

from ..anvil import (
    LoadedWorld,
    RegionSummary,
    get_region_dir,
    find_region_files,
    load_chunks,
)
from ..config import ImportConfig
from ..errors import EmptyWorldError
from ..slime import SlimeEncoder, write_slime_file

logger = logging.getLogger(__name__)


@dataclass
class ConversionProgress:
    """Progress information for an import."""
    phase: str
    current: int
    total: int
    message: str = ""


ProgressCallback = Callable[[ConversionProgress], None]


@dataclass
class ImportResult:
    """Summary of a finished import."""
    world: LoadedWorld
    output_path: Path
    size_bytes: int
    encode_ms: int

    @property
    def chunk_count(self) -> int:
        return len(self.world.chunks)


class ImportPipeline:
    """Pipeline for converting an Anvil world into a Slime file."""

    def __init__(self, config: ImportConfig):
        """Initialize the pipeline.

        Args:
            config: Import configuration
        """
        self.config = config
        config.validate()
        self._encoder = SlimeEncoder(compression_level=config.compression_level)
        self.result: Optional[ImportResult] = None

    def load(self, progress_callback: Optional[ProgressCallback] = None) -> LoadedWorld:
        """Decode every region file of the configured world."""
        def report_progress(phase: str, current: int, total: int, message: str = ""):
            if progress_callback:
                progress_callback(ConversionProgress(phase, current, total, message))

        # Phase 1: Find region files
        report_progress("scan", 0, 1, "Scanning region directory...")
        region_dir = get_region_dir(self.config.world_dir)
        region_files = find_region_files(region_dir)
        report_progress("scan", 1, 1, f"Found {len(region_files)} region files")

        # Phase 2: Decode chunks
        def on_region(done: int, total: int, summary: RegionSummary) -> None:
            if summary.error:
                message = f"{summary.path.name}: skipped"
            else:
                message = f"{summary.path.name}: {summary.loaded} chunks"
            report_progress("load", done, total, message)

        report_progress("load", 0, len(region_files), "Loading world...")
        world = load_chunks(
            region_files,
            parallel=self.config.parallel,
            workers=self.config.workers,
            callback=on_region,
        )
        logger.info("World %s contains %d chunks", self.config.world_name, len(world.chunks))
        return world

    def run(self, progress_callback: Optional[ProgressCallback] = None) -> Path:
        """Run the full import.

        Args:
            progress_callback: Optional callback for progress updates

        Returns:
            Path to the written Slime file

        Raises:
            InvalidWorldError: The world directory is not an Anvil world.
            EmptyWorldError: No non-empty chunk was found.
            WorldTooLarge: The world does not fit the Slime header fields.
            ContainerWriteFailure: The output file could not be written.
        """
        def report_progress(phase: str, current: int, total: int, message: str = ""):
            if progress_callback:
                progress_callback(ConversionProgress(phase, current, total, message))

        world = self.load(progress_callback)
        if not world.chunks:
            raise EmptyWorldError(f"World {self.config.world_name} contains no non-empty chunks")

        # Phase 3: Encode
        report_progress("encode", 0, 1, f"Serializing {len(world.chunks)} chunks...")
        start = time.perf_counter()
        data = self._encoder.encode(world.chunks)
        encode_ms = int((time.perf_counter() - start) * 1000)
        report_progress("encode", 1, 1, f"Serialized in {encode_ms}ms")

        # Phase 4: Save
        output_path = self.config.resolved_output_path
        report_progress("save", 0, 1, f"Saving {output_path}...")
        write_slime_file(output_path, data, overwrite=self.config.overwrite)
        report_progress("save", 1, 1, f"World saved to {output_path}")

        self.result = ImportResult(
            world=world,
            output_path=output_path,
            size_bytes=len(data),
            encode_ms=encode_ms,
        )
        return output_path


def import_world(
    world_dir: Path,
    output_path: Optional[Path] = None,
    progress_callback: Optional[ProgressCallback] = None,
    **kwargs
) -> Path:
    """Convenience function to import a world.

    Args:
        world_dir: Anvil world directory
        output_path: Output file (defaults to "<world name>.slime")
        progress_callback: Optional progress callback
        **kwargs: Additional ImportConfig options

    Returns:
        Path to the written Slime file
    """
    config = ImportConfig(world_dir=world_dir, output_path=output_path, **kwargs)
    pipeline = ImportPipeline(config)
    return pipeline.run(progress_callback)
