"""Organization-scoped entity synchronization for the quoting client.

The package only emits log records. Host applications call
``kalkyle.utils.logging.configure_root()`` once at startup to get the compact
format and the ``KALKYLE_LOG_LEVEL`` / ``KALKYLE_DEBUG`` overrides.
"""

from kalkyle.app.engine import QuoteEngine
from kalkyle.app.session import EngineSession, Principal
from kalkyle.app.settings import Settings, SettingsError

__version__ = "0.1.0"

__all__ = ["EngineSession", "Principal", "QuoteEngine", "Settings", "SettingsError"]
