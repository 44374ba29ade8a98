"""Slime Importer: convert Anvil region worlds into Slime Format files."""

__version__ = "0.1.0"
