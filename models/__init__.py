"""
Models package for canonical records and the error taxonomy.
"""

from .canonical_record import CanonicalRecord, CanonicalReply, CanonicalThread
from .errors import (
    ConnectionExhausted,
    ContentError,
    InvalidReference,
    InvalidRequest,
    NavigationError,
    NavigationTimeout,
    ProviderError,
    SectionNotFound,
    ThreadNotFound,
)

__all__ = [
    "CanonicalRecord",
    "CanonicalReply",
    "CanonicalThread",
    "ConnectionExhausted",
    "ContentError",
    "InvalidReference",
    "InvalidRequest",
    "NavigationError",
    "NavigationTimeout",
    "ProviderError",
    "SectionNotFound",
    "ThreadNotFound",
]
