"""
Browser session management.
"""

from .options import BrowserFamily, build_options
from .session import Session, SessionRegistry, get_driver, session_registry

__all__ = [
    "BrowserFamily",
    "build_options",
    "Session",
    "SessionRegistry",
    "get_driver",
    "session_registry",
]
