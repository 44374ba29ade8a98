"""Configuration classes for Slime imports."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Dict, Any
import json

from .anvil.constants import REGION_DIR_NAME
from .slime.constants import (
    DEFAULT_COMPRESSION_LEVEL,
    MAX_COMPRESSION_LEVEL,
    MIN_COMPRESSION_LEVEL,
    SLIME_FILE_SUFFIX,
)


@dataclass
class ImportConfig:
    """Configuration for converting one world."""
    # Anvil world directory (contains region/)
    world_dir: Path

    # Output file, defaults to "<world name>.slime" in the working directory
    output_path: Optional[Path] = None

    # Processing options
    parallel: bool = True
    workers: Optional[int] = None

    # zstd level for the container blocks
    compression_level: int = DEFAULT_COMPRESSION_LEVEL

    # Replace an existing output file
    overwrite: bool = True

    def __post_init__(self):
        self.world_dir = Path(self.world_dir)
        if self.output_path is not None:
            self.output_path = Path(self.output_path)

    @property
    def world_name(self) -> str:
        """World name, taken from the directory name."""
        return self.world_dir.resolve().name

    @property
    def region_dir(self) -> Path:
        return self.world_dir / REGION_DIR_NAME

    @property
    def resolved_output_path(self) -> Path:
        """Output path, falling back to the default file name."""
        if self.output_path is not None:
            return self.output_path
        return Path(self.world_name + SLIME_FILE_SUFFIX)

    def validate(self) -> None:
        """Validate the configuration."""
        if self.workers is not None and self.workers <= 0:
            raise ValueError(f"workers must be positive: {self.workers}")
        if not MIN_COMPRESSION_LEVEL <= self.compression_level <= MAX_COMPRESSION_LEVEL:
            raise ValueError(
                f"compression_level must be {MIN_COMPRESSION_LEVEL}-{MAX_COMPRESSION_LEVEL}: "
                f"{self.compression_level}"
            )
        if self.output_path is not None and self.output_path.is_dir():
            raise ValueError(f"output_path is a directory: {self.output_path}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "world_dir": str(self.world_dir),
            "output_path": str(self.output_path) if self.output_path else None,
            "parallel": self.parallel,
            "workers": self.workers,
            "compression_level": self.compression_level,
            "overwrite": self.overwrite,
        }

    def save(self, filepath: Path) -> None:
        """Save configuration to JSON file."""
        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImportConfig":
        return cls(
            world_dir=Path(data["world_dir"]),
            output_path=Path(data["output_path"]) if data.get("output_path") else None,
            parallel=data.get("parallel", True),
            workers=data.get("workers"),
            compression_level=data.get("compression_level", DEFAULT_COMPRESSION_LEVEL),
            overwrite=data.get("overwrite", True),
        )

    @classmethod
    def load(cls, filepath: Path) -> "ImportConfig":
        """Load configuration from JSON file."""
        with open(filepath) as f:
            data = json.load(f)
        return cls.from_dict(data)
