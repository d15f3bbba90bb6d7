"""Content-addressed transform cache."""

from .eviction import (
    DEFAULT_GRACE_SECONDS,
    DEFAULT_KEEP_ENTRIES,
    DEFAULT_MAX_TOTAL_BYTES,
    CacheEntry,
    CachePolicy,
    select_evictions,
)
from .store import TransformCache, content_hash
from .transformer import CachedTransformer, transformer_identity

__all__ = [
    "CacheEntry",
    "CachePolicy",
    "CachedTransformer",
    "DEFAULT_GRACE_SECONDS",
    "DEFAULT_KEEP_ENTRIES",
    "DEFAULT_MAX_TOTAL_BYTES",
    "TransformCache",
    "content_hash",
    "select_evictions",
    "transformer_identity",
]
