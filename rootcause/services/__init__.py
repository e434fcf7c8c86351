"""Record loading and resolution services"""

from rootcause.services.record_source import RecordSource, RecordSourceError, InMemoryRecordSource
from rootcause.services.context_loader import ContextLoader
from rootcause.services.rootcause_service import RootcauseService

__all__ = [
    "RecordSource",
    "RecordSourceError",
    "InMemoryRecordSource",
    "ContextLoader",
    "RootcauseService",
]
