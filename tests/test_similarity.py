import numpy as np
import pytest

from companion.similarity import cosine_scores, cosine_similarity


@pytest.mark.parametrize(
    "a, b, expected",
    [
        ([1, 0], [1, 0], 1.0),
        ([1, 0], [0, 1], 0.0),
        ([1, 0], [-1, 0], -1.0),
        ([1, 2], [3, 4, 5], 0.0),
        ([0, 0], [1, 1], 0.0),
        ([0, 0], [0, 0], 0.0),
    ],
)
def test_cosine_similarity(a, b, expected):
    assert cosine_similarity(a, b) == pytest.approx(expected)


def test_cosine_similarity_ignores_magnitude():
    assert cosine_similarity([1, 1], [5, 5]) == pytest.approx(1.0)
    assert cosine_similarity([3, 4], [4, 3]) == pytest.approx(24 / 25)


def test_cosine_scores_batch():
    matrix = np.array([[1.0, 0.0], [0.0, 1.0], [-2.0, 0.0], [0.0, 0.0]])

    scores = cosine_scores([1.0, 0.0], matrix)

    assert scores.tolist() == pytest.approx([1.0, 0.0, -1.0, 0.0])


def test_cosine_scores_width_mismatch():
    assert cosine_scores([1.0, 0.0, 0.0], np.ones((2, 2))).tolist() == [0.0, 0.0]
