"""Timecard reconciliation engine.

Synchronizes a desired weekly timesheet payload into a row-based host entry
grid: normalize -> inventory -> plan -> expand -> write -> recalculate.
"""

__version__ = "0.1.0"
