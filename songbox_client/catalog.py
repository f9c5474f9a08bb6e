"""Startup catalog: the live song list, or a fixed fallback when the API is down."""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from songbox_api.models import FALLBACK_SONGS, Song

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class Live:
    songs: List[Song]
    degraded = False

@dataclass(frozen=True)
class Fallback:
    songs: List[Song]
    reason: str = ""
    degraded = True

CatalogResult = Union[Live, Fallback]

class CatalogLoader:
    """Fetches the catalog once per `load()` call. No retries.

    `api` is anything with a blocking `list_songs()`; the call runs in a worker
    thread so the event loop keeps serving the UI while it waits.
    """

    def __init__(self, api):
        self.api = api
        self.result: Optional[CatalogResult] = None

    @property
    def songs(self) -> List[Song]:
        return list(self.result.songs) if self.result else []

    @property
    def degraded(self) -> bool:
        return bool(self.result and self.result.degraded)

    async def load(self) -> CatalogResult:
        try:
            songs = await asyncio.to_thread(self.api.list_songs)
        except Exception as e:
            logger.warning("Failed to load songs from server: %s", e)
            logger.info("Using predefined songs as fallback")
            self.result = Fallback(list(FALLBACK_SONGS), reason=str(e))
        else:
            self.result = Live(list(songs))
        return self.result
