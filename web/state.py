"""In-memory application state for the web fixer."""

import sys
import os
import threading
from typing import Optional

# Add parent directory so we can import shared modules
app_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if app_dir not in sys.path:
    sys.path.insert(0, app_dir)

from models.fixer_config import FixerConfig
from models.session import FixerSession


class AppState:
    """Holds the single user's session and the lock guarding it."""

    def __init__(self, config: Optional[FixerConfig] = None):
        self.session = FixerSession(config)
        self.lock = threading.Lock()

    @property
    def config(self) -> FixerConfig:
        return self.session.config
