import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DATABASE_URL = os.getenv("SONGBOX_DATABASE_URL", "sqlite:///data/songbox.db")
LOG_LEVEL = os.getenv("SONGBOX_LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("SONGBOX_CORS_ORIGINS", "*").split(",")
    if origin.strip()
]
