"""
Evolver - Source Package

This package contains the evolutionary-computation framework and the
process-level settings and observability helpers around it.
"""

__version__ = "1.0.0"

# Package-level imports for convenience
from src.core.config import settings

__all__ = [
    "settings",
    "__version__",
]
