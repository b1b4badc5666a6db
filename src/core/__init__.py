"""Process settings and observability bootstrap."""

from src.core.config import Settings, settings
from src.core.observability import configure_observability

__all__ = ["Settings", "settings", "configure_observability"]
