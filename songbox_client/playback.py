"""Playback controller: one media resource, one selected song, four states.

    IDLE --select--> READY --play ok--> PLAYING --pause/stop/ended--> READY
                       |  \\--play fails / load error--> ERROR --play--> ...
                       \\<------------- select (from any state) ----------/

Transport calls (`select_song`, `play_pause`, `stop`) and media events are
the only things that move the machine. Everything runs on one event loop, so
handlers never overlap; `play_pause` suspends once, while the resource tries
to start, and checks on resume whether a later call has superseded it.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from songbox_api.models import Song
from songbox_api.utils import format_time

from .media import MediaEvent, MediaEventKind, MediaResource

logger = logging.getLogger(__name__)

class PlaybackState(Enum):
    IDLE = "idle"
    READY = "ready"
    PLAYING = "playing"
    ERROR = "error"

@dataclass
class PlaybackSession:
    selected_song_id: Optional[int] = None
    playing: bool = False
    position_seconds: float = 0.0
    duration_seconds: float = 0.0
    last_error: Optional[str] = None

class PlaybackController:

    def __init__(self, media: MediaResource):
        self.media = media
        self.state = PlaybackState.IDLE
        self.session = PlaybackSession()
        self.song: Optional[Song] = None
        self._epoch = 0     # bumped by every transport call
        self._pending_start: Optional[int] = None   # epoch of the latest start attempt still in flight
        self._listeners: List[Callable[["PlaybackController"], None]] = []
        media.set_listener(self.handle_event)

    # ---------- observers ----------
    def subscribe(self, callback: Callable[["PlaybackController"], None]) -> Callable[[], None]:
        """Call `callback(controller)` after every change. Returns an unsubscribe function."""
        self._listeners.append(callback)
        return lambda: self._listeners.remove(callback)

    def _changed(self):
        for cb in list(self._listeners):
            cb(self)

    def _set(self, state: PlaybackState, error: Optional[str] = None):
        self.state = state
        self.session.playing = state is PlaybackState.PLAYING
        if error is not None:
            self.session.last_error = error
        self._changed()

    # ---------- telemetry ----------
    @property
    def playing(self) -> bool:
        return self.session.playing

    @property
    def progress(self) -> float:
        if self.session.duration_seconds <= 0:
            return 0.0
        return min(1.0, self.session.position_seconds / self.session.duration_seconds)

    def status_line(self) -> str:
        if self.song is None:
            return "Select a song to start playing"
        s = self.session
        return f"{self.song.name}  {format_time(s.position_seconds)} / {format_time(s.duration_seconds)}"

    # ---------- transport ----------
    def select_song(self, song: Song):
        self._epoch += 1
        self.song = song
        self.session = PlaybackSession(selected_song_id=song.id)
        self.media.load(song.audio_url)
        logger.debug("selected song %s (%s)", song.id, song.audio_url)
        self._set(PlaybackState.READY)

    async def play_pause(self):
        if self.song is None:
            return
        if self.state is PlaybackState.PLAYING:
            self._epoch += 1
            self.media.pause()
            self._set(PlaybackState.READY)
            return

        if self._pending_start is not None and self._pending_start == self._epoch:
            return  # already starting; a second press waits on the first

        self._epoch += 1
        epoch = self._epoch
        self._pending_start = epoch
        try:
            await self.media.play()
        except Exception as e:
            if self._pending_start == epoch:
                self._pending_start = None
            if epoch != self._epoch:
                return
            logger.warning("play failed for song %s: %s", self.session.selected_song_id, e)
            self._set(PlaybackState.ERROR, f"Failed to play audio: {e}")
            return

        if epoch != self._epoch:
            # superseded. Only silence the resource if no newer start owns it;
            # a newer start clears or replaces _pending_start.
            if self._pending_start == epoch:
                self._pending_start = None
                if self.state is not PlaybackState.PLAYING:
                    self.media.pause()
            return
        self._pending_start = None
        self.session.last_error = None
        self._set(PlaybackState.PLAYING)

    def stop(self):
        if self.song is None:
            return
        self._epoch += 1
        self.media.pause()
        self.media.seek(0.0)
        self.session.position_seconds = 0.0
        self._set(PlaybackState.READY)

    def dismiss_error(self):
        if self.session.last_error is None and self.state is not PlaybackState.ERROR:
            return
        self.session.last_error = None
        if self.state is PlaybackState.ERROR:
            self.state = PlaybackState.READY
        self._changed()

    def close(self):
        """Drop the session and unbind the resource (leaving the page)."""
        self._epoch += 1
        self.media.pause()
        self.media.load("")
        self.song = None
        self.session = PlaybackSession()
        self._set(PlaybackState.IDLE)

    # ---------- media events ----------
    def handle_event(self, event: MediaEvent):
        if self.song is None:
            return
        s = self.session
        if event.kind is MediaEventKind.METADATA_READY:
            s.duration_seconds = max(0.0, event.value or 0.0)
            self._changed()
        elif event.kind is MediaEventKind.POSITION_UPDATED:
            s.position_seconds = max(0.0, event.value or 0.0)
            self._changed()
        elif event.kind is MediaEventKind.ENDED:
            s.position_seconds = 0.0
            if self.state is PlaybackState.PLAYING:
                self._set(PlaybackState.READY)
            else:
                self._changed()
        elif event.kind is MediaEventKind.ERROR:
            self._epoch += 1
            message = event.message or "Error loading audio file"
            logger.warning("media error on song %s: %s", s.selected_song_id, message)
            self._set(PlaybackState.ERROR, message)
