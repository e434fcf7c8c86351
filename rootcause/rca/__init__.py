"""
RCA Module - Core context resolution logic for root-cause investigations
"""

from rootcause.rca.granularity import (
    Granularity,
    TimeUnit,
    normalize_granularity,
    adjust_granularity
)
from rootcause.rca.time_align import TimeAligner
from rootcause.rca.time_range import TimeRange, RangeComputer
from rootcause.rca.context import (
    Context,
    SessionMeta,
    SetupMode,
    RedirectInstruction,
    ResolvedState
)
from rootcause.rca.inputs import (
    Lookup,
    LookupStatus,
    ResolutionInputs,
    RootcauseParams,
    requires_refresh
)
from rootcause.rca.resolver import ContextResolver, pick_latest_session

__all__ = [
    'Granularity',
    'TimeUnit',
    'normalize_granularity',
    'adjust_granularity',
    'TimeAligner',
    'TimeRange',
    'RangeComputer',
    'Context',
    'SessionMeta',
    'SetupMode',
    'RedirectInstruction',
    'ResolvedState',
    'Lookup',
    'LookupStatus',
    'ResolutionInputs',
    'RootcauseParams',
    'requires_refresh',
    'ContextResolver',
    'pick_latest_session'
]
