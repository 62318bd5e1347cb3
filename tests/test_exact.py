import numpy as np
import pytest

from approx_kfn import ExactFurthestSearch, InvalidArgumentError


def test_exact_search_matches_brute_force(rng):
    reference = rng.random((60, 4))
    queries = rng.random((15, 4))

    neighbors, distances = ExactFurthestSearch(reference).search(queries, k=4)

    all_distances = np.linalg.norm(queries[:, None, :] - reference[None, :, :], axis=2)
    expected = np.argsort(-all_distances, axis=1)[:, :4]
    np.testing.assert_array_equal(neighbors, expected)
    np.testing.assert_allclose(
        distances, np.take_along_axis(all_distances, expected, axis=1), rtol=1e-10
    )


def test_exact_search_with_k_equal_to_reference_size(rng):
    reference = rng.random((5, 2))

    neighbors, _ = ExactFurthestSearch(reference).search(reference, k=5)

    # Each point is its own nearest, so it ranks last
    np.testing.assert_array_equal(neighbors[:, -1], np.arange(5))


def test_exact_search_rejects_bad_arguments(rng):
    exact = ExactFurthestSearch(rng.random((10, 3)))

    with pytest.raises(InvalidArgumentError):
        exact.search(rng.random((2, 3)), k=11)
    with pytest.raises(InvalidArgumentError):
        exact.search(rng.random((2, 2)), k=1)
