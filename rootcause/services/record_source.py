"""
Abstract record source interface for loose coupling between record retrieval and context resolution.

Implementations fetch raw records from wherever they live (the root-cause
backend, a cache, test fixtures). The context loader only depends on this
contract.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional
import structlog

logger = structlog.get_logger(__name__)


class RecordSource(ABC):
    """
    Abstract base class for all record sources.

    Methods return raw dicts in the upstream shape; parsing happens in the loader.
    """

    @abstractmethod
    async def fetch_entity(self, urn: str) -> Optional[Dict[str, Any]]:
        """
        Fetch one entity through the identity framework.

        Returns:
            The first matching entity, or None if the urn resolves to nothing

        Raises:
            RecordSourceError: If the lookup itself fails
        """
        pass

    @abstractmethod
    async def fetch_session(self, session_id: str) -> Optional[Dict[str, Any]]:
        """Fetch a saved session by id, None if it does not exist."""
        pass

    @abstractmethod
    async def query_sessions(self, anomaly_id: str) -> List[Dict[str, Any]]:
        """List saved sessions linked to an anomaly."""
        pass

    @abstractmethod
    def get_name(self) -> str:
        """Return the name of this record source."""
        pass


class RecordSourceError(Exception):
    """Raised when a record source fails to complete a lookup."""

    def __init__(self, message: str, source: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.source = source
        self.original_error = original_error


class InMemoryRecordSource(RecordSource):
    """Record source backed by plain dicts"""

    def __init__(
        self,
        entities: Optional[Iterable[Dict[str, Any]]] = None,
        sessions: Optional[Iterable[Dict[str, Any]]] = None
    ):
        self.entities: Dict[str, Dict[str, Any]] = {e["urn"]: e for e in (entities or [])}
        self.sessions: Dict[str, Dict[str, Any]] = {str(s["id"]): s for s in (sessions or [])}

    async def fetch_entity(self, urn: str) -> Optional[Dict[str, Any]]:
        return self.entities.get(urn)

    async def fetch_session(self, session_id: str) -> Optional[Dict[str, Any]]:
        return self.sessions.get(str(session_id))

    async def query_sessions(self, anomaly_id: str) -> List[Dict[str, Any]]:
        return [
            s for s in self.sessions.values()
            if str(s.get("anomalyId")) == str(anomaly_id)
        ]

    def get_name(self) -> str:
        return "memory"
