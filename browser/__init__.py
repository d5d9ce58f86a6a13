"""
Browser automation for JavaScript-rendered providers.
"""

from .connector import (
    LocalBrowserLauncher,
    RemoteBrowserLauncher,
    RetryingConnector,
    RetryPolicy,
    is_overloaded,
)
from .extractor import ExtractionMode, ExtractionSchema, FieldExtractor, FieldSpec
from .scroller import LazyLoadScroller
from .session import BrowserSession, ReadyCondition, Session

__all__ = [
    "BrowserSession",
    "ExtractionMode",
    "ExtractionSchema",
    "FieldExtractor",
    "FieldSpec",
    "LazyLoadScroller",
    "LocalBrowserLauncher",
    "ReadyCondition",
    "RemoteBrowserLauncher",
    "RetryPolicy",
    "RetryingConnector",
    "Session",
    "is_overloaded",
]
