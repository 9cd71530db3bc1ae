"""General utility functions."""

import time
from functools import wraps
import numpy as np


def time_function(func):
    """
    Decorator to time function execution.
    For recursive functions, only times the top-level call.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        if not hasattr(wrapper, '_in_call'):
            wrapper._in_call = False

        if not wrapper._in_call:
            wrapper._in_call = True
            start_time = time.time()
            try:
                result = func(*args, **kwargs)
                elapsed = time.time() - start_time
                print(f"{func.__name__} took {elapsed:.6f} seconds")
                return result
            finally:
                wrapper._in_call = False
        else:
            return func(*args, **kwargs)

    return wrapper


def next_power_of_two(n):
    """Smallest power of two that is >= n (1 for n <= 1)."""
    length = 1
    while length < n:
        length *= 2
    return length


def as_points(points, count=None):
    """
    View a point collection as an (M, K) numpy array.

    Numpy arrays are viewed, not copied. PointCloud objects are unwrapped.

    Args:
        points: (M, K) array, sequence of K-tuples or PointCloud
        count: Optional number of leading points to use

    Returns:
        Array of shape (count, K)
    """
    values = np.asarray(getattr(points, 'points', points))
    if values.ndim != 2:
        raise ValueError(f"Points must be a 2-D array of shape (M, K), got shape {values.shape}")
    if values.shape[0] == 0 or values.shape[1] == 0:
        raise ValueError("Point collection is empty")
    if count is not None:
        if not 0 < count <= values.shape[0]:
            raise ValueError(f"count must be in 1..{values.shape[0]}, got {count}")
        values = values[:count]
    return values


def as_box(query_min, query_max, dimension):
    """Validate query bounds and return them as two 1-D arrays of length dimension."""
    lower = np.asarray(query_min).reshape(-1)
    upper = np.asarray(query_max).reshape(-1)
    if lower.shape[0] != dimension or upper.shape[0] != dimension:
        raise ValueError(f"Query bounds must have {dimension} components, "
                         f"got {lower.shape[0]} and {upper.shape[0]}")
    return lower, upper
