from riskintake.core.config import Settings, get_settings, settings
from riskintake.core.logging import ScoringLogger, get_logger

__all__ = [
    "ScoringLogger",
    "Settings",
    "get_logger",
    "get_settings",
    "settings",
]
