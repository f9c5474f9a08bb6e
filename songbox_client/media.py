"""Media resource contract and an ffplay-backed implementation.

The controller talks to exactly one object implementing `MediaResource`.
The resource reports what happens to the audio through a single listener
callback, one `MediaEvent` at a time, in the order things happened.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol, Set

from songbox_api.errors import PlaybackError

from . import config

logger = logging.getLogger(__name__)

class MediaEventKind(Enum):
    METADATA_READY = "metadataReady"      # value = duration in seconds
    POSITION_UPDATED = "positionUpdated"  # value = current position in seconds
    ENDED = "ended"
    ERROR = "error"                       # message = what went wrong

@dataclass(frozen=True)
class MediaEvent:
    kind: MediaEventKind
    value: float = 0.0
    message: Optional[str] = None

MediaListener = Callable[[MediaEvent], None]

class MediaResource(Protocol):
    src: str

    def set_listener(self, listener: MediaListener) -> None: ...

    def load(self, url: str) -> None:
        """Rebind to `url` (empty string unbinds) and start loading it in the background."""

    async def play(self) -> None:
        """Start or resume playback. Raises PlaybackError when the source cannot play."""

    def pause(self) -> None: ...

    def seek(self, position_seconds: float) -> None: ...


class FfplayMediaResource:
    """Plays the bound URL through an `ffplay` child process.

    Pausing ends the process and remembers the position; resuming starts a
    new one with `-ss`. Duration comes from `ffprobe` when a URL is loaded.
    Needs a running event loop.
    """

    def __init__(self, ffplay: str = config.FFPLAY_PATH, ffprobe: str = config.FFPROBE_PATH,
                 tick: float = 0.25):
        self.ffplay = ffplay
        self.ffprobe = ffprobe
        self.tick = tick
        self.src = ""
        self._listener: Optional[MediaListener] = None
        self._proc: Optional[asyncio.subprocess.Process] = None
        self._offset = 0.0
        self._started: Optional[float] = None
        self._generation = 0
        self._probe: Optional[asyncio.Task] = None
        self._tasks: Set[asyncio.Task] = set()

    def set_listener(self, listener: MediaListener) -> None:
        self._listener = listener

    def _emit(self, kind: MediaEventKind, value: float = 0.0, message: Optional[str] = None):
        if self._listener is not None:
            self._listener(MediaEvent(kind, value, message))

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @property
    def current_time(self) -> float:
        if self._started is None:
            return self._offset
        return self._offset + (asyncio.get_running_loop().time() - self._started)

    # ---------- binding ----------
    def load(self, url: str) -> None:
        self._halt()
        self._generation += 1
        self.src = url
        self._offset = 0.0
        if self._probe is not None:
            self._probe.cancel()
            self._probe = None
        if url:
            self._probe = self._spawn(self._probe_duration(url, self._generation))

    async def _probe_duration(self, url: str, generation: int):
        try:
            proc = await asyncio.create_subprocess_exec(
                self.ffprobe, "-v", "error",
                "-show_entries", "format=duration",
                "-of", "default=noprint_wrappers=1:nokey=1",
                url,
                stdout=asyncio.subprocess.PIPE, stderr=asyncio.subprocess.PIPE,
            )
            out, err = await proc.communicate()
        except OSError as e:
            if generation == self._generation:
                self._emit(MediaEventKind.ERROR, message=f"Error loading audio file: {e}")
            return
        if generation != self._generation:
            return
        if proc.returncode != 0:
            detail = err.decode(errors="replace").strip() or f"ffprobe exited with {proc.returncode}"
            self._emit(MediaEventKind.ERROR, message=f"Error loading audio file: {detail}")
            return
        try:
            duration = float(out.decode().strip())
        except ValueError:
            duration = 0.0  # live streams report N/A
        self._emit(MediaEventKind.METADATA_READY, duration)

    # ---------- transport ----------
    async def play(self) -> None:
        if not self.src:
            raise PlaybackError("No audio source loaded")
        if self._proc is not None:
            return
        generation = self._generation
        try:
            proc = await asyncio.create_subprocess_exec(
                self.ffplay, "-nodisp", "-autoexit", "-loglevel", "error",
                "-ss", f"{self._offset:.3f}", self.src,
                stdout=asyncio.subprocess.DEVNULL, stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise PlaybackError(f"Failed to play audio: {e}") from e
        if generation != self._generation or self._proc is not None:
            # rebound (or started twice) while spawning
            proc.kill()
            return
        self._proc = proc
        self._started = asyncio.get_running_loop().time()
        self._spawn(self._watch(proc))

    async def _watch(self, proc: asyncio.subprocess.Process):
        ticker = self._spawn(self._tick(proc))
        try:
            _, err = await proc.communicate()
        finally:
            ticker.cancel()
        if proc is not self._proc:
            return  # halted on purpose
        self._proc = None
        self._started = None
        if proc.returncode == 0:
            self._offset = 0.0
            self._emit(MediaEventKind.ENDED)
        else:
            detail = err.decode(errors="replace").strip() or f"ffplay exited with {proc.returncode}"
            logger.warning("ffplay failed on %s: %s", self.src, detail)
            self._emit(MediaEventKind.ERROR, message=f"Playback failed: {detail}")

    async def _tick(self, proc: asyncio.subprocess.Process):
        while proc is self._proc:
            self._emit(MediaEventKind.POSITION_UPDATED, self.current_time)
            await asyncio.sleep(self.tick)

    def _halt(self):
        proc = self._proc
        if proc is None:
            return
        self._offset = self.current_time
        self._proc = None
        self._started = None
        if proc.returncode is None:
            try:
                proc.terminate()
            except ProcessLookupError:
                pass

    def pause(self) -> None:
        self._halt()

    def seek(self, position_seconds: float) -> None:
        running = self._proc is not None
        self._halt()
        self._offset = max(0.0, float(position_seconds))
        self._emit(MediaEventKind.POSITION_UPDATED, self._offset)
        if running:
            self._spawn(self._resume())

    async def _resume(self):
        try:
            await self.play()
        except PlaybackError as e:
            self._emit(MediaEventKind.ERROR, message=str(e))
