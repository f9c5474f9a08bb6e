import asyncio
from datetime import datetime, timezone

from songbox_api.errors import PlaybackError
from songbox_api.models import Song
from songbox_client.media import MediaEvent, MediaEventKind
from songbox_client.playback import PlaybackController, PlaybackState


class FakeMedia:
    def __init__(self):
        self.src = ""
        self.calls = []
        self.listener = None
        self.fail = None
        self.gate = None

    def set_listener(self, listener):
        self.listener = listener

    def load(self, url):
        self.calls.append(("load", url))
        self.src = url

    async def play(self):
        self.calls.append(("play", self.src))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise PlaybackError(self.fail)

    def pause(self):
        self.calls.append(("pause",))

    def seek(self, position_seconds):
        self.calls.append(("seek", position_seconds))

    def emit(self, kind, value=0.0, message=None):
        self.listener(MediaEvent(kind, value, message))


def song(song_id, name=None):
    return Song(id=song_id, name=name or f"Song {song_id}", audio_url=f"https://example.com/{song_id}.mp3",
                created_at=datetime(2024, 1, song_id, tzinfo=timezone.utc))


A, B = song(1), song(2)


def make():
    media = FakeMedia()
    return media, PlaybackController(media)


def playing_controller():
    media, c = make()
    c.select_song(A)
    asyncio.run(c.play_pause())
    assert c.state is PlaybackState.PLAYING
    return media, c


def test_starts_idle():
    _, c = make()
    assert c.state is PlaybackState.IDLE
    assert c.session.selected_song_id is None
    assert not c.playing


def test_play_pause_without_song_does_nothing():
    media, c = make()
    asyncio.run(c.play_pause())
    c.stop()
    assert c.state is PlaybackState.IDLE
    assert media.calls == []


def test_select_binds_and_resets():
    media, c = make()
    c.select_song(A)
    assert c.state is PlaybackState.READY
    assert media.calls == [("load", A.audio_url)]
    assert c.session.selected_song_id == A.id
    assert c.session.position_seconds == 0
    assert c.session.duration_seconds == 0


def test_reselect_before_playback_rebinds_same_resource():
    media, c = make()
    c.select_song(A)
    media.emit(MediaEventKind.METADATA_READY, 180.0)
    media.emit(MediaEventKind.POSITION_UPDATED, 12.0)
    c.select_song(B)
    assert c.media is media
    assert media.src == B.audio_url
    assert c.session.selected_song_id == B.id
    assert c.session.position_seconds == 0
    assert c.session.duration_seconds == 0
    assert not any(call[0] == "play" for call in media.calls)


def test_play_then_pause():
    media, c = playing_controller()
    assert c.playing
    assert c.session.last_error is None
    asyncio.run(c.play_pause())
    assert c.state is PlaybackState.READY
    assert not c.playing
    assert media.calls[-1] == ("pause",)


def test_rejected_start_lands_in_error():
    media, c = make()
    media.fail = "NotAllowedError"
    c.select_song(A)
    asyncio.run(c.play_pause())
    assert c.state is PlaybackState.ERROR
    assert not c.playing
    assert "NotAllowedError" in c.session.last_error
    assert c.session.selected_song_id == A.id


def test_retry_from_error():
    media, c = make()
    media.fail = "offline"
    c.select_song(A)
    asyncio.run(c.play_pause())
    media.fail = None
    asyncio.run(c.play_pause())
    assert c.state is PlaybackState.PLAYING
    assert c.session.last_error is None


def test_telemetry_events_keep_state():
    media, c = playing_controller()
    media.emit(MediaEventKind.METADATA_READY, 200.0)
    media.emit(MediaEventKind.POSITION_UPDATED, 50.0)
    assert c.state is PlaybackState.PLAYING
    assert c.session.duration_seconds == 200.0
    assert c.session.position_seconds == 50.0
    assert c.progress == 0.25
    assert c.status_line() == "Song 1  0:50 / 3:20"


def test_progress_is_zero_until_duration_known():
    media, c = make()
    c.select_song(A)
    media.emit(MediaEventKind.POSITION_UPDATED, 5.0)
    assert c.progress == 0.0


def test_natural_end_returns_to_ready():
    media, c = playing_controller()
    media.emit(MediaEventKind.POSITION_UPDATED, 199.0)
    media.emit(MediaEventKind.ENDED)
    assert c.state is PlaybackState.READY
    assert c.session.position_seconds == 0
    assert not c.playing


def test_media_error_moves_to_error():
    media, c = playing_controller()
    media.emit(MediaEventKind.ERROR, message="Error loading audio file")
    assert c.state is PlaybackState.ERROR
    assert not c.playing
    assert c.session.last_error == "Error loading audio file"
    assert c.session.selected_song_id == A.id


def test_load_error_after_select():
    media, c = make()
    c.select_song(A)
    media.emit(MediaEventKind.ERROR, message="decode failed")
    assert c.state is PlaybackState.ERROR
    assert not c.playing


def test_events_without_song_are_ignored():
    media, c = make()
    media.emit(MediaEventKind.ERROR, message="late")
    media.emit(MediaEventKind.POSITION_UPDATED, 3.0)
    assert c.state is PlaybackState.IDLE
    assert c.session.last_error is None
    assert c.session.position_seconds == 0


def test_stop_rewinds():
    media, c = playing_controller()
    media.emit(MediaEventKind.POSITION_UPDATED, 42.0)
    c.stop()
    assert c.state is PlaybackState.READY
    assert c.session.position_seconds == 0
    assert media.calls[-2:] == [("pause",), ("seek", 0.0)]


def test_stop_from_error():
    media, c = make()
    c.select_song(A)
    media.emit(MediaEventKind.ERROR, message="bad")
    c.stop()
    assert c.state is PlaybackState.READY


def test_dismiss_error():
    media, c = make()
    c.select_song(A)
    media.emit(MediaEventKind.ERROR, message="bad")
    c.dismiss_error()
    assert c.state is PlaybackState.READY
    assert c.session.last_error is None


def test_reselect_clears_error():
    media, c = make()
    c.select_song(A)
    media.emit(MediaEventKind.ERROR, message="bad")
    c.select_song(B)
    assert c.state is PlaybackState.READY
    assert c.session.last_error is None


def test_new_selection_supersedes_inflight_start():
    media, c = make()
    c.select_song(A)

    async def scenario():
        media.gate = asyncio.Event()
        task = asyncio.create_task(c.play_pause())
        await asyncio.sleep(0)
        assert c.state is PlaybackState.READY
        c.select_song(B)
        media.gate.set()
        await task

    asyncio.run(scenario())
    assert c.state is PlaybackState.READY
    assert not c.playing
    assert media.src == B.audio_url
    assert media.calls[-1] == ("pause",)


def test_superseded_failure_does_not_flag_error():
    media, c = make()
    c.select_song(A)
    media.fail = "aborted"

    async def scenario():
        media.gate = asyncio.Event()
        task = asyncio.create_task(c.play_pause())
        await asyncio.sleep(0)
        c.stop()
        media.gate.set()
        await task

    asyncio.run(scenario())
    assert c.state is PlaybackState.READY
    assert c.session.last_error is None


class AudibleMedia(FakeMedia):
    """Starts sounding as soon as play() is called, before the start settles."""

    def __init__(self):
        super().__init__()
        self.audible = False

    async def play(self):
        self.calls.append(("play", self.src))
        self.audible = True
        if self.gate is not None:
            await self.gate.wait()

    def pause(self):
        super().pause()
        self.audible = False


def test_double_press_while_starting_keeps_audio_on():
    media = AudibleMedia()
    c = PlaybackController(media)
    c.select_song(A)

    async def scenario():
        media.gate = asyncio.Event()
        first = asyncio.create_task(c.play_pause())
        second = asyncio.create_task(c.play_pause())
        await asyncio.sleep(0)
        media.gate.set()
        await asyncio.gather(first, second)

    asyncio.run(scenario())
    assert not (c.state is PlaybackState.PLAYING and not media.audible)
    assert c.state is PlaybackState.PLAYING
    assert media.audible
    assert [call for call in media.calls if call[0] == "play"] == [("play", A.audio_url)]


def test_start_stop_start_ends_playing_and_audible():
    media = AudibleMedia()
    c = PlaybackController(media)
    c.select_song(A)

    async def scenario():
        media.gate = asyncio.Event()
        first = asyncio.create_task(c.play_pause())
        await asyncio.sleep(0)
        c.stop()
        second = asyncio.create_task(c.play_pause())
        await asyncio.sleep(0)
        media.gate.set()
        await asyncio.gather(first, second)

    asyncio.run(scenario())
    assert c.state is PlaybackState.PLAYING
    assert media.audible


def test_start_never_left_playing_on_failure():
    media, c = make()
    c.select_song(A)
    media.fail = "resource inaccessible"

    async def scenario():
        media.gate = asyncio.Event()
        task = asyncio.create_task(c.play_pause())
        await asyncio.sleep(0)
        assert c.state is not PlaybackState.PLAYING
        media.gate.set()
        await task

    asyncio.run(scenario())
    assert c.state is PlaybackState.ERROR
    assert not c.playing


def test_playing_implies_selection():
    media, c = playing_controller()
    seen = []
    c.subscribe(lambda ctl: seen.append((ctl.playing, ctl.session.selected_song_id)))
    media.emit(MediaEventKind.POSITION_UPDATED, 1.0)
    c.close()
    assert seen
    assert all(sel is not None for playing, sel in seen if playing)


def test_subscribers_see_changes_and_can_unsubscribe():
    media, c = make()
    states = []
    unsubscribe = c.subscribe(lambda ctl: states.append(ctl.state))
    c.select_song(A)
    asyncio.run(c.play_pause())
    unsubscribe()
    c.stop()
    assert states == [PlaybackState.READY, PlaybackState.PLAYING]


def test_close_discards_session():
    media, c = playing_controller()
    c.close()
    assert c.state is PlaybackState.IDLE
    assert c.song is None
    assert c.session.selected_song_id is None
    assert media.src == ""
    assert c.status_line() == "Select a song to start playing"
