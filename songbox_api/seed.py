import argparse
import logging
import os
from urllib.parse import quote

from mutagen import File

from . import config
from .errors import SongboxError
from .storage import SongStore

VALID_EXTENSIONS = tuple(
    ext.strip().lower()
    for ext in os.getenv("VALID_AUDIO_EXTENSIONS", ".mp3,.flac,.wav,.m4a,.ogg").split(",")
    if ext.strip()
)

def song_name(full_path):
    """'Artist - Title' from the tags, else the title, else the file name without extension."""
    fallback = os.path.splitext(os.path.basename(full_path))[0]
    try:
        audio = File(full_path, easy=True)
    except Exception as e:
        print(f"Error reading {full_path}: {e}")
        return fallback
    if not audio:
        return fallback
    title = (audio.get("title") or [None])[0]
    artist = (audio.get("artist") or [None])[0]
    if title and artist:
        return f"{artist} - {title}"
    return title or fallback

def scan_folder(folder_path, base_url):
    """(name, audio_url) for every audio file under folder_path, served from base_url."""
    entries = []
    root_abs = os.path.abspath(folder_path)
    for root, _, files in os.walk(root_abs):
        for file in sorted(files):
            if not file.lower().endswith(VALID_EXTENSIONS):
                continue
            full_path = os.path.join(root, file)
            rel = os.path.relpath(full_path, root_abs).replace(os.sep, "/")
            url = f"{base_url.rstrip('/')}/{'/'.join(quote(p) for p in rel.split('/'))}"
            entries.append((song_name(full_path), url))
    return entries

def main(argv=None):
    parser = argparse.ArgumentParser(description="Insert songs into the songbox catalog.")
    parser.add_argument("--database-url", default=config.DATABASE_URL, help="SQLAlchemy database URL")
    sub = parser.add_subparsers(dest="cmd", required=True)

    one = sub.add_parser("add", help="Insert a single song")
    one.add_argument("--name", required=True, help="Song name")
    one.add_argument("--url", required=True, help="Absolute audio URL")

    scan = sub.add_parser("scan", help="Insert every audio file in a folder")
    scan.add_argument("path", help="Folder to scan")
    scan.add_argument("--base-url", required=True, help="URL the folder is served from")

    args = parser.parse_args(argv)
    logging.basicConfig(level=config.LOG_LEVEL)

    store = SongStore.from_url(args.database_url)
    try:
        store.create_schema()
        if args.cmd == "add":
            entries = [(args.name, args.url)]
        else:
            print(f"🎵 Scanning: {args.path}")
            entries = scan_folder(args.path, args.base_url)
            print(f"📁 Found {len(entries)} tracks.")
        for name, url in entries:
            song = store.add_song(name, url)
            print(f"✅ #{song.id} {song.name}")
    except SongboxError as e:
        print(f"❌ {e}")
        return 1
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
