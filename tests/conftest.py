import pytest

from companion.embedding import EmbeddingProvider
from companion.memory_config import MemoryConfig
from companion.memory_manager import MemoryManager
from companion.summarizer import Summarizer
from companion.vector_store import VectorStore

DIM = 4


class StubCompletion:
    """Records calls and returns a fixed reply (or raises)."""

    def __init__(self, reply="They discussed greetings.", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def __call__(self, system_prompt, user_prompt, max_tokens=None):
        self.calls.append((system_prompt, user_prompt, max_tokens))
        if self.error:
            raise self.error
        return self.reply


def keyword_embed(text: str) -> list[float]:
    """Tiny bag-of-topics embedding: cats, coffee, music, everything else."""
    lower = text.lower()
    return [
        float(lower.count("cat")),
        float(lower.count("coffee")),
        float(lower.count("music")),
        1.0 if not any(k in lower for k in ("cat", "coffee", "music")) else 0.0,
    ]


@pytest.fixture
def config(tmp_path):
    return MemoryConfig(data_dir=str(tmp_path / "data"), embedding_dim=DIM)


@pytest.fixture
def completion():
    return StubCompletion()


@pytest.fixture
def embedder(config):
    return EmbeddingProvider.from_config(keyword_embed, config)


@pytest.fixture
def vector_store(config, embedder):
    return VectorStore(config.vector_path, embedder, config)


@pytest.fixture
def summarizer(config, completion):
    return Summarizer(completion, config)


@pytest.fixture
def memory(config, vector_store, summarizer):
    manager = MemoryManager(vector_store, summarizer, config)
    manager.load()
    return manager
