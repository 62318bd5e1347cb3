import numpy as np

from approx_kfn.retrieval import furthest_neighbors, pairwise_distances, select_furthest


def test_pairwise_distances():
    queries = np.array([[0.0, 0.0], [1.0, 1.0]])
    points = np.array([[3.0, 4.0], [1.0, 0.0]])

    distances = pairwise_distances(queries, points)

    np.testing.assert_allclose(distances, [[5.0, 1.0], [np.sqrt(13.0), 1.0]])


def test_select_furthest_keeps_largest_with_stable_ties():
    distances = np.array([[1.0, 3.0, 3.0, 2.0], [0.5, 0.1, 0.9, 0.9]])

    columns, top = select_furthest(distances, 3)

    np.testing.assert_array_equal(columns, [[1, 2, 3], [2, 3, 0]])
    np.testing.assert_array_equal(top, [[3.0, 3.0, 2.0], [0.9, 0.9, 0.5]])


def test_furthest_neighbors_full_ranking(rng):
    queries = rng.random((9, 3))
    points = rng.random((6, 3))

    neighbors, distances = furthest_neighbors(queries, points, k=6, batch_size=4)

    for q in range(9):
        expected = np.linalg.norm(points - queries[q], axis=1)
        np.testing.assert_array_equal(np.sort(neighbors[q]), np.arange(6))
        np.testing.assert_allclose(distances[q], np.sort(expected)[::-1])


def test_furthest_neighbors_blocks_agree(rng):
    queries = rng.random((25, 4))
    points = rng.random((10, 4))

    blocked = furthest_neighbors(queries, points, k=3, batch_size=3)
    single = furthest_neighbors(queries, points, k=3, batch_size=100)

    np.testing.assert_array_equal(blocked[0], single[0])
    np.testing.assert_array_equal(blocked[1], single[1])
