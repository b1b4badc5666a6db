"""
Logging and Logfire bootstrap.

Library code only creates loggers and spans; applications call
``configure_observability`` once at start-up to decide where they go.
"""

import logging
from typing import Optional

import logfire

from src.core.config import Settings, settings as default_settings


def configure_observability(settings: Optional[Settings] = None) -> None:
    """Configure Logfire and the ``evolver`` logger hierarchy from settings."""
    settings = settings or default_settings
    logfire_settings = settings.get_logfire_settings()

    logfire.configure(
        token=logfire_settings["token"],
        service_name=logfire_settings["service_name"],
        environment=logfire_settings["environment"],
        send_to_logfire="if-token-present",
        console=None if settings.logfire_console else False,
    )

    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    logging.getLogger("evolver").setLevel(getattr(logging, settings.log_level))
