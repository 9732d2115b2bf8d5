"""Embedding provider adapter: text in, fixed-length vector out, never raises."""

import logging
import numbers
from typing import Callable

from companion.memory_config import MemoryConfig

logger = logging.getLogger(__name__)


class EmbeddingProvider:
    """Wraps a raw embed_fn with truncation and a zero-vector fallback.

    A broken embedding backend only makes retrieval worse (no matches);
    it must never take the conversation down with it.
    """

    def __init__(
        self,
        embed_fn: Callable[[str], list[float]],
        dim: int = 768,
        max_chars: int = 8000,
    ):
        self.embed_fn = embed_fn
        self.dim = dim
        self.max_chars = max_chars

    @classmethod
    def from_config(
        cls, embed_fn: Callable[[str], list[float]], config: MemoryConfig
    ) -> "EmbeddingProvider":
        return cls(embed_fn, dim=config.embedding_dim, max_chars=config.embedding_max_chars)

    def zero_vector(self) -> list[float]:
        return [0.0] * self.dim

    def embed(self, text: str) -> list[float]:
        cleaned = (text or "").strip()[: self.max_chars]
        if not cleaned:
            return self.zero_vector()

        try:
            vector = self.embed_fn(cleaned)
        except Exception as e:
            logger.error("Embedding call failed (non-fatal): %s", e)
            return self.zero_vector()

        if not isinstance(vector, (list, tuple)) or not vector or not all(
            isinstance(v, numbers.Real) for v in vector
        ):
            logger.error("Invalid embedding response (non-fatal): %r", type(vector))
            return self.zero_vector()

        if len(vector) != self.dim:
            logger.error(
                "Embedding has %d dimensions, expected %d (non-fatal)", len(vector), self.dim
            )
            return self.zero_vector()

        return [float(v) for v in vector]
