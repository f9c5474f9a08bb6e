from typing import List, Optional
from urllib.parse import urljoin

import pydantic
import requests

from songbox_api.errors import StorageError, ValidationError
from songbox_api.models import GetSongInput, Song

from . import config

class SongApiClient:
    """HTTP client for the two song queries under /api."""

    def __init__(self, base_url: str = config.API_BASE, timeout: float = config.HTTP_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/") + "/"
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get(self, path: str):
        url = urljoin(self.base_url, path)
        try:
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()
            return resp.json()
        except requests.RequestException as e:
            raise StorageError(f"GET {url} failed: {e}") from e
        except ValueError as e:
            raise StorageError(f"GET {url} returned malformed JSON: {e}") from e

    def list_songs(self) -> List[Song]:
        data = self._get("songs")
        if not isinstance(data, list):
            raise StorageError(f"Expected a list of songs, got {type(data).__name__}")
        try:
            return [Song.model_validate(item) for item in data]
        except pydantic.ValidationError as e:
            raise StorageError(f"Malformed song in catalog: {e}") from e

    def get_song(self, song_id: int) -> Optional[Song]:
        try:
            song_id = GetSongInput.model_validate({"id": song_id}).id
        except pydantic.ValidationError as e:
            raise ValidationError(f"Invalid song id {song_id!r}: must be a positive integer") from e
        data = self._get(f"songs/{song_id}")
        if data is None:
            return None
        try:
            return Song.model_validate(data)
        except pydantic.ValidationError as e:
            raise StorageError(f"Malformed song {song_id}: {e}") from e
