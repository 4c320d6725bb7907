# Core modules

from .config import settings, Settings, get_settings
from .session import SessionManager, ShopperSession

__all__ = ["settings", "Settings", "get_settings", "SessionManager", "ShopperSession"]
