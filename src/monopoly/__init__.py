from .app import create_app, startup
from .config import Settings
from .db import Gateway

__all__ = ["create_app", "startup", "Settings", "Gateway"]
