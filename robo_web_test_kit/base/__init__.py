"""
Base classes for page objects and API clients.
"""

from .api import BaseAPI
from .page import BasePage

__all__ = ["BaseAPI", "BasePage"]
