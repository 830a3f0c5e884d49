"""
iis-commons - Connection context for Information Server command-line tools
"""

__version__ = "0.3.0"

from .context import EnvironmentContext
from .errors import ContextError
from .models import AccessType, CommandResult, InventorySnapshot, PatchEvent
from .rest_connection import RestConnection

__all__ = [
    "AccessType",
    "CommandResult",
    "ContextError",
    "EnvironmentContext",
    "InventorySnapshot",
    "PatchEvent",
    "RestConnection",
]
