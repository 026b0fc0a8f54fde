"""Output abstraction layer."""

from .console import (
    ConsoleProtocol,
    MockConsole,
    RichConsole,
    Style,
)
from .release_log import ReleaseLog

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "ReleaseLog",
    "RichConsole",
    "Style",
]
