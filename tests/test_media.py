import asyncio

import pytest

from songbox_api.errors import PlaybackError
from songbox_client.media import FfplayMediaResource, MediaEventKind

MISSING = "/nonexistent/songbox-test-binary"


def test_play_without_source_is_rejected():
    res = FfplayMediaResource(ffplay=MISSING, ffprobe=MISSING)
    with pytest.raises(PlaybackError):
        asyncio.run(res.play())


def test_missing_player_binary_is_a_playback_error():
    async def scenario():
        res = FfplayMediaResource(ffplay=MISSING, ffprobe=MISSING)
        res.src = "https://example.com/a.mp3"
        await res.play()

    with pytest.raises(PlaybackError):
        asyncio.run(scenario())


def test_failed_probe_reports_error_event():
    events = []

    async def scenario():
        res = FfplayMediaResource(ffplay=MISSING, ffprobe=MISSING)
        res.set_listener(events.append)
        res.load("https://example.com/a.mp3")
        await res._probe

    asyncio.run(scenario())
    assert [e.kind for e in events] == [MediaEventKind.ERROR]
    assert "Error loading audio file" in events[0].message


def test_seek_while_stopped_moves_position():
    events = []
    res = FfplayMediaResource(ffplay=MISSING, ffprobe=MISSING)
    res.set_listener(events.append)
    res.seek(12.5)
    assert res.current_time == 12.5
    res.seek(-4)
    assert res.current_time == 0.0
    assert [e.value for e in events] == [12.5, 0.0]


def test_unbinding_clears_source():
    async def scenario():
        res = FfplayMediaResource(ffplay=MISSING, ffprobe=MISSING)
        res.load("https://example.com/a.mp3")
        res.load("")
        return res

    res = asyncio.run(scenario())
    assert res.src == ""
    assert res.current_time == 0.0
