#!/usr/bin/env python3
"""
Slime Importer - Convert an Anvil world into a Slime Format file.

Usage:
    python3 main.py convert <world>              # Asks for confirmation
    python3 main.py convert <world> --yes        # No prompt
    python3 main.py convert <world> -o out.slime # Custom output file
    python3 main.py info <world>                 # Inspect without writing
    python3 main.py --help                       # Show help
"""

import sys
from pathlib import Path

# Add src to path so we can run without installing
sys.path.insert(0, str(Path(__file__).parent / "src"))


if __name__ == "__main__":
    from slimeimporter.cli import app
    app()
