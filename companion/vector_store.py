"""Long-term memory: summaries with embeddings, persisted as one JSON file."""

import logging
from pathlib import Path

import numpy as np
from pydantic import ValidationError

from companion.embedding import EmbeddingProvider
from companion.memory_config import MemoryConfig
from companion.memory_schema import MemoryVector, VectorStoreState
from companion.similarity import cosine_scores
from companion.storage import JsonStorage, StorageError

logger = logging.getLogger(__name__)


class VectorStore:
    """Append-only collection of MemoryVector records with similarity search.

    Loaded lazily on first use and cached; every add rewrites the file.
    Once over capacity the oldest records are evicted first.
    """

    def __init__(
        self,
        path: str | Path,
        embedder: EmbeddingProvider,
        config: MemoryConfig | None = None,
        storage: JsonStorage | None = None,
    ):
        self.path = Path(path)
        self.embedder = embedder
        self.config = config or MemoryConfig()
        self.storage = storage or JsonStorage()
        self._vectors: list[MemoryVector] = []
        self._loaded = False

    def load(self) -> None:
        if self._loaded:
            return

        self._vectors = []
        try:
            if self.storage.path_exists(self.path):
                raw = self.storage.read_json(self.path)
                self._vectors = VectorStoreState.model_validate(raw).vectors
                logger.info("Loaded %d memory vectors", len(self._vectors))
        except (StorageError, ValidationError) as e:
            logger.error("Failed to load vector store (non-fatal): %s", e)
            self._vectors = []
        self._loaded = True

    def save(self) -> None:
        state = VectorStoreState(vectors=self._vectors)
        try:
            self.storage.write_json(self.path, state.model_dump(by_alias=True))
        except StorageError as e:
            logger.error("Failed to save vector store (non-fatal): %s", e)

    def add(self, text: str, summary: str, message_count: int) -> MemoryVector:
        """Embed the summary (not the raw text) and append a new memory."""
        self.load()

        logger.debug("Embedding summary: '%s...'", summary[:50])
        vector = MemoryVector(
            text=text,
            summary=summary,
            embedding=self.embedder.embed(summary),
            message_count=message_count,
        )
        self._vectors.append(vector)

        overflow = len(self._vectors) - self.config.vector_capacity
        if overflow > 0:
            del self._vectors[:overflow]

        self.save()
        logger.info("Added memory %s, total: %d", vector.id, len(self._vectors))
        return vector

    def search(self, query: str, top_k: int | None = None) -> list[MemoryVector]:
        """Return up to top_k stored memories scoring above the similarity floor."""
        self.load()
        if top_k is None:
            top_k = self.config.retrieval_top_k

        if not self._vectors:
            return []

        logger.debug("Searching for: '%s...'", query[:50])
        query_vec = self.embedder.embed(query)

        scores = cosine_scores(query_vec, self._embedding_matrix(len(query_vec)))
        order = np.argsort(-scores, kind="stable")[:top_k]
        hits = [i for i in order if scores[i] > self.config.retrieval_min_similarity]

        logger.info(
            "Found %d relevant memories (scores: %s)",
            len(hits),
            ", ".join(f"{scores[i]:.2f}" for i in hits),
        )
        return [self._vectors[i] for i in hits]

    def _embedding_matrix(self, dim: int) -> np.ndarray:
        """Stored embeddings as rows; rows of another width stay zero and score 0."""
        matrix = np.zeros((len(self._vectors), dim))
        for row, v in enumerate(self._vectors):
            if len(v.embedding) == dim:
                matrix[row] = v.embedding
        return matrix

    def count(self) -> int:
        self.load()
        return len(self._vectors)

    def get_all(self) -> list[MemoryVector]:
        """Every stored memory, oldest first."""
        self.load()
        return list(self._vectors)
