"""Application configuration"""

import logging
from dotenv import load_dotenv

from .loader import load_app_config
from .core import Core
from .cache import Cache
from .storage import Storage
from .recovery import Recovery

load_dotenv()

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s]: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logging.basicConfig(format=LOG_FORMAT, datefmt=DATE_FORMAT, level=logging.INFO)
logging.getLogger("aiohttp.access").setLevel(logging.WARNING)

_APP_CONFIG = load_app_config()

core = Core(_APP_CONFIG)
cache = Cache(_APP_CONFIG)
storage = Storage(_APP_CONFIG)
recovery = Recovery(_APP_CONFIG)


class Config:
    core = core
    cache = cache
    storage = storage
    recovery = recovery


__all__ = ["core", "cache", "storage", "recovery", "Config"]
