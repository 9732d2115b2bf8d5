from companion.embedding import EmbeddingProvider


def _raise(text):
    raise ConnectionError("provider down")


def test_failing_provider_returns_zero_vector():
    provider = EmbeddingProvider(_raise, dim=8)
    assert provider.embed("anything") == [0.0] * 8


def test_blank_input_skips_the_call():
    calls = []
    provider = EmbeddingProvider(lambda t: calls.append(t) or [1.0, 2.0], dim=2)

    assert provider.embed("   \n\t ") == [0.0, 0.0]
    assert provider.embed("") == [0.0, 0.0]
    assert calls == []


def test_input_is_trimmed_and_truncated():
    seen = []

    def embed_fn(text):
        seen.append(text)
        return [1.0, 0.0]

    provider = EmbeddingProvider(embed_fn, dim=2, max_chars=5)
    assert provider.embed("  abcdefgh  ") == [1.0, 0.0]
    assert seen == ["abcde"]


def test_malformed_response_returns_zero_vector():
    assert EmbeddingProvider(lambda t: {"data": []}, dim=3).embed("x") == [0.0] * 3
    assert EmbeddingProvider(lambda t: None, dim=3).embed("x") == [0.0] * 3
    assert EmbeddingProvider(lambda t: [], dim=3).embed("x") == [0.0] * 3
    assert EmbeddingProvider(lambda t: ["a", "b", "c"], dim=3).embed("x") == [0.0] * 3
    assert EmbeddingProvider(lambda t: [1.0, 2.0], dim=3).embed("x") == [0.0] * 3
    assert EmbeddingProvider(lambda t: [1.0] * 4, dim=3).embed("x") == [0.0] * 3


def test_valid_response_is_returned_as_floats():
    provider = EmbeddingProvider(lambda t: [1, 2, 3], dim=3)
    assert provider.embed("x") == [1.0, 2.0, 3.0]
