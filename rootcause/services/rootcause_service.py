"""
Root-Cause Service - Load records and resolve the investigation context
"""

from datetime import datetime
from typing import Optional
import pytz
import structlog

from rootcause.config.settings import Settings, get_settings
from rootcause.rca.context import ResolvedState
from rootcause.rca.inputs import RootcauseParams
from rootcause.rca.resolver import ContextResolver
from rootcause.rca.time_align import TimeAligner
from rootcause.services.context_loader import ContextLoader
from rootcause.services.record_source import RecordSource

logger = structlog.get_logger(__name__)


class RootcauseService:
    """Entry point used when a user opens the investigation screen"""

    def __init__(self, source: RecordSource, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        self.loader = ContextLoader(source, timeout=settings.fetch_timeout_seconds)
        self.resolver = ContextResolver.from_settings(settings)

    async def resolve(
        self,
        params: RootcauseParams,
        owner: str = "",
        now: Optional[int] = None
    ) -> ResolvedState:
        """
        Fetch the records referenced by params and resolve the context.

        Args:
            params: Addressable parameters of the screen
            owner: Authenticated user name, owner of a new session
            now: Current time in epoch millis (defaults to the wall clock)
        """
        inputs = await self.loader.load(params)

        if now is None:
            now = TimeAligner.to_millis(datetime.now(pytz.utc))

        return self.resolver.resolve(params, inputs, now, owner=owner)
