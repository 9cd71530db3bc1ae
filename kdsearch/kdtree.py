"""Static kd-tree stored as an implicit binary tree in a flat array, for orthogonal range search."""

import numpy as np

from .partition import get_partitioner
from .search import range_search, find_many
from .utils import time_function, next_power_of_two, as_points


class TreeArray:
    """
    Heap-ordered kd-tree slots.

    Slot 0 is the root, slot i has children 2i+1 and 2i+2. Each slot holds a
    point index when ``occupied`` is set and nothing otherwise.
    """

    def __init__(self, indices, occupied, dimension, size):
        self.indices = indices
        self.occupied = occupied
        self.dimension = dimension
        self.size = size

    def __len__(self):
        return self.indices.shape[0]

    def __getitem__(self, slot):
        if 0 <= slot < len(self) and self.occupied[slot]:
            return int(self.indices[slot])
        return None

    def is_empty(self, slot):
        return slot < 0 or slot >= len(self) or not self.occupied[slot]

    def as_masked(self):
        """Slots as a masked array, empty slots masked out."""
        return np.ma.array(self.indices, mask=~self.occupied)

    @property
    def height(self):
        """Number of levels that hold at least one point."""
        filled = np.flatnonzero(self.occupied)
        return int(np.floor(np.log2(filled[-1] + 1))) + 1

    def freeze(self):
        self.indices.flags.writeable = False
        self.occupied.flags.writeable = False
        return self


def _allocate(length, count):
    """Tree slots, occupancy mask and the working index buffer."""
    indices = np.zeros(length, dtype=np.int64)
    occupied = np.zeros(length, dtype=bool)
    buffer = np.arange(count, dtype=np.int64)
    return indices, occupied, buffer


@time_function
def build_tree(values, partitioner, slots=None, buffer=None, index=0, lo=0, hi=None, depth=0):
    """
    Recursively fill the tree array from the median of each index range.

    Args:
        values: (M, K) point array
        partitioner: Callable ``(indices, values, dimension, lo, hi) -> median``
        slots: (indices, occupied) arrays being filled; allocated at the top-level call
        buffer: Working permutation of point indices; allocated at the top-level call
        index: Tree slot to commit
        lo, hi: Inclusive range of ``buffer`` assigned to this slot
        depth: Depth of ``index`` in the tree

    Returns:
        TreeArray
    """
    # Initialize storage only at the top-level call
    if slots is None:
        count, dimension = values.shape
        indices, occupied, buffer = _allocate(next_power_of_two(count), count)
        build_tree(values, partitioner, (indices, occupied), buffer, 0, 0, count - 1, 0)
        return TreeArray(indices, occupied, dimension, count).freeze()

    indices, occupied = slots

    if lo == hi:
        median = lo
    else:
        median = partitioner(buffer, values, depth % values.shape[1], lo, hi)

    indices[index] = buffer[median]
    occupied[index] = True

    if lo < median:
        build_tree(values, partitioner, slots, buffer, 2 * index + 1, lo, median - 1, depth + 1)
    if median < hi:
        build_tree(values, partitioner, slots, buffer, 2 * index + 2, median + 1, hi, depth + 1)
    return None


class KDSearchArray:
    """Static kd-tree over a point collection, built once and queried many times."""

    def __init__(self, dimension=None, strategy='sort', pivot='random', seed=None):
        """
        Args:
            dimension: Number of ordinates per point. Inferred at prepare() when None.
            strategy: Median partition strategy: 'sort', 'select' or 'argpartition'
            pivot: Pivot rule for the 'select' strategy: 'random' or 'middle'
            seed: Seed for random pivots
        """
        self.dimension = dimension
        self.strategy = strategy
        self.pivot = pivot
        self.rng = np.random.default_rng(seed)
        self.partitioner = get_partitioner(strategy, pivot, self.rng)
        self.tree = None

    def prepare(self, points, count=None):
        """
        Build the tree from points[:count].

        Args:
            points: (M, K) array, sequence of K-tuples or PointCloud
            count: Number of leading points to index (default: all)

        Returns:
            True on success, False when the tree could not be allocated
        """
        # Previous tree is dropped whether or not the rebuild succeeds
        self.tree = None
        values = as_points(points, count)
        if self.dimension is not None and values.shape[1] != self.dimension:
            raise ValueError(f"Expected {self.dimension}-dimensional points, got {values.shape[1]}")

        try:
            tree = build_tree(values, self.partitioner)
        except MemoryError:
            print(f"Warning: could not allocate kd-tree for {values.shape[0]} points")
            return False

        self.dimension = tree.dimension
        self.tree = tree
        return True

    def clear(self):
        self.tree = None

    @property
    def is_prepared(self):
        return self.tree is not None

    @property
    def length(self):
        """Capacity of the tree array (0 when not prepared)."""
        return 0 if self.tree is None else len(self.tree)

    @property
    def size(self):
        """Number of indexed points (0 when not prepared)."""
        return 0 if self.tree is None else self.tree.size

    @property
    def height(self):
        return 0 if self.tree is None else self.tree.height

    def __len__(self):
        return self.size

    def _prepared_tree(self):
        tree = self.tree
        if tree is None:
            raise RuntimeError("KDSearchArray is not prepared; call prepare() first")
        return tree

    def _values(self, points, tree):
        values = as_points(points)
        if values.shape[0] < tree.size or values.shape[1] != tree.dimension:
            raise ValueError(f"Points of shape {values.shape} do not match the prepared "
                             f"tree ({tree.size} points, {tree.dimension} dimensions)")
        return values

    def find(self, points, query_min, query_max, output=None, index=0, depth=0):
        """
        Append the indices of all points inside [query_min, query_max] to output.

        Args:
            points: The collection passed to prepare()
            query_min: Lower corner of the query box (inclusive)
            query_max: Upper corner of the query box (inclusive)
            output: List to append to (a new list when None)
            index: Tree slot to start from
            depth: Depth of ``index``

        Returns:
            output
        """
        tree = self._prepared_tree()
        if output is None:
            output = []
        range_search(self._values(points, tree), tree, query_min, query_max, output, index, depth)
        return output

    def find_many(self, points, boxes, n_jobs=1):
        """
        Run one range search per (query_min, query_max) box.

        Returns:
            List of result lists, in the order of ``boxes``
        """
        tree = self._prepared_tree()
        return find_many(self._values(points, tree), tree, boxes, n_jobs=n_jobs)

    def verify(self, points):
        """
        Check the kd-property on every slot.

        Returns:
            True when every left descendant is <= and every right descendant
            is >= its ancestor on the ancestor's split dimension
        """
        tree = self._prepared_tree()
        values = self._values(points, tree)
        return _check_subtree(values, tree, 0, 0)[0]


def _check_subtree(values, tree, index, depth):
    """Returns (valid, minima, maxima) for the subtree rooted at index."""
    x = tree[index]
    if x is None:
        return True, None, None

    d = depth % tree.dimension
    lo = values[x].copy()
    hi = values[x].copy()
    valid = True

    for child, on_left in ((2 * index + 1, True), (2 * index + 2, False)):
        child_valid, child_lo, child_hi = _check_subtree(values, tree, child, depth + 1)
        valid = valid and child_valid
        if child_lo is None:
            continue
        if on_left and child_hi[d] > values[x, d]:
            valid = False
        if not on_left and child_lo[d] < values[x, d]:
            valid = False
        lo = np.minimum(lo, child_lo)
        hi = np.maximum(hi, child_hi)

    return valid, lo, hi
