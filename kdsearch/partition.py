"""Median partition strategies used while building the kd-tree array."""

from functools import partial

import numpy as np


def median_position(lo, hi):
    """
    Median slot of the inclusive range [lo, hi]. Upper median for even sizes.

    The left half is never smaller than the right one, which keeps the heap
    layout of M points inside next_power_of_two(M) slots.
    """
    return (lo + hi + 1) // 2


def sort_partition(indices, values, dimension, lo, hi):
    """
    Stable sort of indices[lo..hi] by the ordinate on the given dimension.

    Deterministic: points with equal ordinates keep their relative order.

    Args:
        indices: int64 array of point indices, reordered in place
        values: (M, K) point array
        dimension: Split dimension
        lo, hi: Inclusive range of ``indices`` to process

    Returns:
        Median position inside [lo, hi]
    """
    segment = indices[lo:hi + 1]
    order = np.argsort(values[segment, dimension], kind='stable')
    indices[lo:hi + 1] = segment[order]
    return median_position(lo, hi)


def select_partition(indices, values, dimension, lo, hi, pivot='random', rng=None):
    """
    Quickselect the median of indices[lo..hi] on the given dimension.

    Each round moves the entries smaller than the pivot in front of it and
    the rest behind it, then keeps only the side that holds the median.
    Expected linear time with a random pivot. ``pivot='middle'`` is
    deterministic but quadratic on adversarial input.

    Args:
        indices: int64 array of point indices, reordered in place
        values: (M, K) point array
        dimension: Split dimension
        lo, hi: Inclusive range of ``indices`` to process
        pivot: 'random' or 'middle'
        rng: numpy Generator used for random pivots

    Returns:
        Median position inside [lo, hi]
    """
    target = median_position(lo, hi)
    column = values[:, dimension]
    if rng is None:
        rng = np.random.default_rng()

    while lo < hi:
        if pivot == 'random':
            k = lo + int(rng.integers(hi + 1 - lo))
        else:
            k = median_position(lo, hi)

        segment = indices[lo:hi + 1].copy()
        keys = column[segment]
        pivot_offset = k - lo
        smaller = keys < keys[pivot_offset]
        rest = ~smaller
        rest[pivot_offset] = False

        n_smaller = int(np.count_nonzero(smaller))
        indices[lo:lo + n_smaller] = segment[smaller]
        indices[lo + n_smaller] = segment[pivot_offset]
        indices[lo + n_smaller + 1:hi + 1] = segment[rest]

        # pivot is now final at lo + n_smaller
        split = lo + n_smaller
        if target == split:
            break
        if target < split:
            hi = split - 1
        else:
            lo = split + 1

    return target


def argpartition_partition(indices, values, dimension, lo, hi):
    """
    Partition indices[lo..hi] with numpy's introselect.

    Ties end up in unspecified order, the median inequality still holds.
    """
    target = median_position(lo, hi)
    segment = indices[lo:hi + 1]
    order = np.argpartition(values[segment, dimension], target - lo)
    indices[lo:hi + 1] = segment[order]
    return target


def get_partitioner(strategy='sort', pivot='random', rng=None):
    """
    Get partition function for a strategy name.

    Args:
        strategy: One of 'sort', 'select', 'argpartition'
        pivot: Pivot rule for 'select': 'random' or 'middle'
        rng: numpy Generator for random pivots

    Returns:
        Callable ``(indices, values, dimension, lo, hi) -> median``
    """
    if pivot not in ('random', 'middle'):
        raise ValueError(f"Unknown pivot: {pivot}")

    partitioners = {
        'sort': sort_partition,
        'select': partial(select_partition, pivot=pivot, rng=rng),
        'argpartition': argpartition_partition,
    }

    if strategy not in partitioners:
        raise ValueError(f"Unknown strategy: {strategy}")
    return partitioners[strategy]
