"""Import pipeline from Anvil worlds to Slime files."""

from .pipeline import (
    ConversionProgress,
    ImportPipeline,
    ImportResult,
    ProgressCallback,
    import_world,
)

__all__ = [
    "ConversionProgress",
    "ImportPipeline",
    "ImportResult",
    "ProgressCallback",
    "import_world",
]
