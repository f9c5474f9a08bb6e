import logging
from typing import Any, List, Optional

import pydantic

from .errors import ValidationError
from .models import GetSongInput, Song
from .storage import SongStore

logger = logging.getLogger(__name__)

class SongQueryService:
    """Read-only queries over the song table.

    Input is validated here, before the store is touched, so callers can tell
    a bad id (ValidationError) from a dead database (StorageError) from a
    missing row (None).
    """

    def __init__(self, store: SongStore):
        self.store = store

    def list_songs(self) -> List[Song]:
        songs = self.store.list_songs()
        logger.debug("list_songs -> %d songs", len(songs))
        return songs

    def get_song(self, song_id: Any) -> Optional[Song]:
        try:
            params = GetSongInput.model_validate({"id": song_id})
        except pydantic.ValidationError as e:
            raise ValidationError(f"Invalid song id {song_id!r}: must be a positive integer") from e
        song = self.store.get_song(params.id)
        if song is None:
            logger.debug("get_song(%s) -> not found", params.id)
        return song
