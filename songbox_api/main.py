import logging

# Use absolute package imports so uvicorn can resolve the module reliably.
from songbox_api import config
from songbox_api.app import create_app

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = create_app()
