"""Orthogonal range search over a kd-tree array."""

import numpy as np
from joblib import Parallel, delayed

from .utils import as_box


def range_search(values, tree, query_min, query_max, output, index=0, depth=0):
    """
    Collect the indices of all points inside the box [query_min, query_max].

    Subtrees are skipped when the split value of their parent already lies
    outside the query bounds on the split dimension.

    Args:
        values: (M, K) point array the tree was built from
        tree: TreeArray
        query_min: Lower corner of the box (inclusive)
        query_max: Upper corner of the box (inclusive)
        output: List that matching indices are appended to
        index: Tree slot to start from
        depth: Depth of ``index``
    """
    lower, upper = as_box(query_min, query_max, tree.dimension)
    _visit(values, tree.indices, tree.occupied, lower, upper, output, index, depth)


def _visit(values, indices, occupied, lower, upper, output, index, depth):
    if index < 0 or index >= indices.shape[0] or not occupied[index]:
        return

    x = indices[index]
    point = values[x]
    if np.all(lower <= point) and np.all(point <= upper):
        output.append(int(x))

    d = depth % values.shape[1]
    if lower[d] <= point[d]:
        _visit(values, indices, occupied, lower, upper, output, 2 * index + 1, depth + 1)
    if point[d] <= upper[d]:
        _visit(values, indices, occupied, lower, upper, output, 2 * index + 2, depth + 1)


def brute_force_search(values, query_min, query_max):
    """
    Linear scan over all points.

    Returns:
        Sorted int64 array of the indices inside [query_min, query_max]
    """
    values = np.asarray(values)
    lower, upper = as_box(query_min, query_max, values.shape[1])
    inside = np.all((values >= lower) & (values <= upper), axis=1)
    return np.flatnonzero(inside)


def _search_one(values, tree, box):
    output = []
    range_search(values, tree, box[0], box[1], output)
    return output


def find_many(values, tree, boxes, n_jobs=1):
    """
    Run independent range searches for a batch of boxes.

    The tree is read-only, so searches share it across threads.

    Args:
        values: (M, K) point array
        tree: TreeArray
        boxes: Iterable of (query_min, query_max) pairs
        n_jobs: Number of parallel jobs (-1 for all cores)

    Returns:
        List of result lists, one per box
    """
    return Parallel(n_jobs=n_jobs, prefer="threads")(
        delayed(_search_one)(values, tree, box) for box in boxes
    )
