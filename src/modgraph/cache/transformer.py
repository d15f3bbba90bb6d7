"""Cache-aware wrapper around a source transformer."""

from __future__ import annotations

from modgraph.builder.protocols import SourceTransformer
from modgraph.cache.store import TransformCache, content_hash


class CachedTransformer:
    """Serves transform output from the cache, filling it on miss.

    Keys cover both the source text and the transformer identity, so
    transformers sharing one cache directory never see each other's output.
    """

    def __init__(
        self,
        transformer: SourceTransformer,
        cache: TransformCache,
        namespace: str | None = None,
    ) -> None:
        self._transformer = transformer
        self._cache = cache
        self._namespace = namespace if namespace is not None else transformer_identity(transformer)

    @property
    def namespace(self) -> str:
        return self._namespace

    def cache_key(self, code: str) -> str:
        """Return the content hash used to store output for code."""
        return content_hash(f"{self._namespace}\0{code}")

    def transform(self, code: str) -> str:
        """Return cached output for identical code, transforming only on miss."""
        if not self._cache.enabled:
            return self._transformer.transform(code)
        key = self.cache_key(code)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        transformed = self._transformer.transform(code)
        self._cache.put(key, transformed)
        return transformed


def transformer_identity(transformer: SourceTransformer) -> str:
    """Describe a transformer by its command line, or by its class when it has none."""
    argv = getattr(transformer, "argv", None)
    if isinstance(argv, tuple) and all(isinstance(part, str) for part in argv):
        return "\0".join(("command", *argv))
    kind = type(transformer)
    return f"{kind.__module__}.{kind.__qualname__}"
