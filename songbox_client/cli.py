import argparse
import asyncio
import logging

from songbox_api.utils import format_time

from . import config
from .api import SongApiClient
from .catalog import CatalogLoader
from .media import FfplayMediaResource
from .playback import PlaybackController

HELP = "Commands: <number> select · p play/pause · s stop · l list · d dismiss · i info · q quit"

def print_catalog(loader: CatalogLoader, controller: PlaybackController):
    if loader.degraded:
        print("📝 Note: Using predefined songs (server not available)")
    songs = loader.songs
    if not songs:
        print("No songs available")
        return
    for i, song in enumerate(songs, 1):
        mark = "▶" if controller.song and controller.song.id == song.id else " "
        print(f"{mark} {i:>2}. {song.name}  (added {song.created_at:%Y-%m-%d})")

def print_status(controller: PlaybackController):
    s = controller.session
    print(f"[{controller.state.value}] {controller.status_line()}")
    if s.last_error:
        print(f"⚠️  {s.last_error}")

async def run(api_base: str):
    loader = CatalogLoader(SongApiClient(api_base))
    print("Loading songs...")
    await loader.load()

    controller = PlaybackController(FfplayMediaResource())
    last = {"state": controller.state, "error": None}

    def on_change(c: PlaybackController):
        # only report discrete changes; position ticks would flood the terminal
        if c.state is not last["state"] or c.session.last_error != last["error"]:
            last["state"], last["error"] = c.state, c.session.last_error
            print_status(c)

    controller.subscribe(on_change)
    print_catalog(loader, controller)
    print(HELP)

    pending = set()
    try:
        while True:
            cmd = (await asyncio.to_thread(input, "> ")).strip().lower()
            if not cmd:
                continue
            if cmd == "q":
                break
            if cmd == "l":
                print_catalog(loader, controller)
            elif cmd == "p":
                if controller.song is None:
                    print("Select a song to start playing")
                    continue
                task = asyncio.create_task(controller.play_pause())
                pending.add(task)
                task.add_done_callback(pending.discard)
            elif cmd == "s":
                controller.stop()
            elif cmd == "d":
                controller.dismiss_error()
            elif cmd == "i":
                print_status(controller)
                s = controller.session
                print(f"{format_time(s.position_seconds)} / {format_time(s.duration_seconds)}"
                      f"  ({controller.progress:.0%})")
            elif cmd.isdigit() and 1 <= int(cmd) <= len(loader.songs):
                controller.select_song(loader.songs[int(cmd) - 1])
            else:
                print(HELP)
    except (EOFError, KeyboardInterrupt):
        pass
    finally:
        controller.close()
        for task in pending:
            task.cancel()
    return 0

def main(argv=None):
    parser = argparse.ArgumentParser(description="Pick a song from the catalog and play it in the terminal.")
    parser.add_argument("--api-base", default=config.API_BASE, help="Songbox API base URL")
    parser.add_argument("--log-level", default=config.LOG_LEVEL, help="Logging level")
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    return asyncio.run(run(args.api_base))

if __name__ == "__main__":
    raise SystemExit(main())
