import os
from dotenv import load_dotenv

load_dotenv()

API_BASE = os.getenv("SONGBOX_API_BASE", "http://localhost:8000/api")
HTTP_TIMEOUT = float(os.getenv("SONGBOX_HTTP_TIMEOUT", "10"))
LOG_LEVEL = os.getenv("SONGBOX_LOG_LEVEL", "INFO").upper()
FFPLAY_PATH = os.getenv("SONGBOX_FFPLAY", "ffplay")
FFPROBE_PATH = os.getenv("SONGBOX_FFPROBE", "ffprobe")
