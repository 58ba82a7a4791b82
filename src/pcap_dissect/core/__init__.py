from .config import settings, get_settings, Settings
from .constants import *  # noqa: F401,F403
from .cache import PacketCache

__all__ = [
    "settings",
    "get_settings",
    "Settings",
    "PacketCache",
] + [name for name in globals().keys() if name.isupper()]
