"""Load lifecycle around network construction: idle -> loading -> ready | failed."""
from __future__ import annotations

import enum
import logging
from typing import Awaitable, Callable, Iterable, Optional

from .network import build_network

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Error loading relationship data"

FetchApproaches = Callable[[], Awaitable[Iterable[dict]]]


class LoadState(enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class NetworkLoader:
    """Fetches approaches and builds the network for the current focal person.

    Each ``load`` supersedes every earlier one: when a fetch resolves after a
    newer ``load`` (or ``hide``) has started, its result is discarded.
    """

    def __init__(self, fetch_approaches: FetchApproaches):
        self._fetch = fetch_approaches
        self._request = 0
        self.state = LoadState.IDLE
        self.network: Optional[dict] = None
        self.error: Optional[str] = None
        self.focal_person: Optional[dict] = None

    def hide(self):
        """Close the view: back to idle, and any in-flight load becomes stale."""
        self._request += 1
        self.state = LoadState.IDLE
        self.network = None
        self.error = None
        self.focal_person = None

    async def load(self, focal_person: dict) -> LoadState:
        self._request += 1
        request = self._request
        self.state = LoadState.LOADING
        self.focal_person = focal_person
        self.network = None
        self.error = None

        try:
            approaches = await self._fetch()
            network = build_network(focal_person, approaches)
        except Exception as e:
            if request != self._request:
                logger.info("Ignoring failure of superseded network load: %s", e)
                return self.state
            logger.error("Network load failed for %s: %s", focal_person.get("id"), e)
            self.state = LoadState.FAILED
            self.error = LOAD_ERROR_MESSAGE
            return self.state

        if request != self._request:
            logger.info("Discarding stale network for %s", focal_person.get("id"))
            return self.state
        self.network = network
        self.state = LoadState.READY
        return self.state
