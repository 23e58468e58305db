"""Command line entrypoint: python -m timecard_sync.cli PAYLOAD --grid WORKBOOK.xlsx"""

from .app import main

__all__ = ["main"]
