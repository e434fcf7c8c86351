"""
Offset tables for anomaly and analysis windows, keyed by granularity unit.

Anomaly offsets are in steps of the granularity itself, analysis offsets
are always in days. Units missing from a table fall back to -1.
"""

from rootcause.rca.granularity import TimeUnit

DEFAULT_OFFSET = -1

ANOMALY_OFFSETS = {
    TimeUnit.MINUTES: -120,
    TimeUnit.HOURS: -3,
    TimeUnit.DAYS: -1,
}

ANALYSIS_OFFSETS_DAYS = {
    TimeUnit.MINUTES: -1,
    TimeUnit.HOURS: -2,
    TimeUnit.DAYS: -7,
}


def anomaly_offset(unit: TimeUnit) -> int:
    return ANOMALY_OFFSETS.get(unit, DEFAULT_OFFSET)


def analysis_offset(unit: TimeUnit) -> int:
    return ANALYSIS_OFFSETS_DAYS.get(unit, DEFAULT_OFFSET)
