import json
import math

import pytest

from companion.embedding import EmbeddingProvider
from companion.memory_config import MemoryConfig
from companion.vector_store import VectorStore


def _fixed_embedder(vectors: dict[str, list[float]]) -> EmbeddingProvider:
    return EmbeddingProvider(lambda text: vectors[text], dim=2)


def _unit(cos: float) -> list[float]:
    """A 2-d unit vector whose cosine with [1, 0] is cos."""
    return [cos, math.sqrt(1 - cos * cos)]


@pytest.mark.parametrize("score, expected", [(0.2, 0), (0.5, 1)])
def test_search_applies_similarity_floor(tmp_path, score, expected):
    embedder = _fixed_embedder({"query": [1.0, 0.0], "summary": _unit(score)})
    store = VectorStore(tmp_path / "v.json", embedder, MemoryConfig())
    store.add("raw", "summary", 3)

    results = store.search("query", 3)

    assert len(results) == expected
    if expected:
        assert results[0].summary == "summary"


def test_search_on_empty_store_skips_embedding(tmp_path):
    calls = []
    embedder = EmbeddingProvider(lambda t: calls.append(t) or [1.0, 0.0], dim=2)
    store = VectorStore(tmp_path / "v.json", embedder)

    assert store.search("anything") == []
    assert calls == []


def test_search_orders_by_score_and_limits_top_k(vector_store):
    vector_store.add("a", "We talked about music", 5)
    vector_store.add("b", "Cats and coffee and more cats", 5)
    vector_store.add("c", "A cat photo", 5)
    vector_store.add("d", "coffee", 5)

    results = vector_store.search("my cat", 2)

    assert [r.summary for r in results] == ["A cat photo", "Cats and coffee and more cats"]


def test_add_embeds_summary_not_raw_text(tmp_path):
    seen = []

    def embed_fn(text):
        seen.append(text)
        return [1.0, 0.0]

    store = VectorStore(tmp_path / "v.json", EmbeddingProvider(embed_fn, dim=2))
    vector = store.add("USER: hi\nASSISTANT: hello", "They said hi.", 2)

    assert seen == ["They said hi."]
    assert vector.text == "USER: hi\nASSISTANT: hello"
    assert vector.message_count == 2
    assert vector.id.startswith("mem_")


def test_eviction_is_fifo(vector_store):
    first = vector_store.add("raw 0", "summary 0", 3)
    for i in range(1, 100):
        vector_store.add(f"raw {i}", f"summary {i}", 3)
    last = vector_store.add("raw 100", "summary 100", 3)

    ids = [v.id for v in vector_store.get_all()]
    assert vector_store.count() == 100
    assert first.id not in ids
    assert ids[-1] == last.id
    assert vector_store.get_all()[0].summary == "summary 1"


def test_ids_are_unique(vector_store):
    ids = {vector_store.add("r", "s", 3).id for _ in range(20)}
    assert len(ids) == 20


def test_persists_and_reloads(config, embedder):
    store = VectorStore(config.vector_path, embedder, config)
    added = store.add("raw", "Coffee talk", 4)

    on_disk = json.loads(config.vector_path.read_text(encoding="utf-8"))
    assert on_disk["version"] == 1
    assert on_disk["vectors"][0]["messageCount"] == 4

    reloaded = VectorStore(config.vector_path, embedder, config)
    assert reloaded.count() == 1
    assert reloaded.get_all()[0].id == added.id


def test_loads_file_missing_optional_fields(config, embedder):
    config.vector_path.parent.mkdir(parents=True)
    config.vector_path.write_text(
        json.dumps({"vectors": [{"id": "mem_1_abc", "summary": "old", "embedding": [1, 0, 0, 0]}]}),
        encoding="utf-8",
    )

    store = VectorStore(config.vector_path, embedder, config)

    assert store.count() == 1
    assert store.get_all()[0].message_count == 0


def test_corrupt_file_reads_as_empty(config, embedder):
    config.vector_path.parent.mkdir(parents=True)
    config.vector_path.write_text("{not json", encoding="utf-8")

    store = VectorStore(config.vector_path, embedder, config)

    assert store.count() == 0
    store.add("raw", "still works", 3)
    assert store.count() == 1


def test_write_failure_keeps_memory_in_process(tmp_path, embedder):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory", encoding="utf-8")
    store = VectorStore(blocker / "v.json", embedder)

    store.add("raw", "cat nap", 3)

    assert store.count() == 1
    assert store.search("cat")[0].summary == "cat nap"


def test_stored_vectors_of_another_width_score_zero(config, embedder):
    config.vector_path.parent.mkdir(parents=True)
    config.vector_path.write_text(
        json.dumps({"vectors": [
            {"id": "mem_1_old", "summary": "old cat", "embedding": [1, 0]},
            {"id": "mem_2_new", "summary": "new cat", "embedding": [1, 0, 0, 0]},
        ]}),
        encoding="utf-8",
    )

    store = VectorStore(config.vector_path, embedder, config)

    assert [v.id for v in store.search("cat")] == ["mem_2_new"]
