"""
kdsearch - Static kd-tree for orthogonal range search

A small spatial index library featuring:
- kd-tree stored as an implicit binary tree in a flat array
- Sort, quickselect and introselect median partitioning
- Pruned range search with threaded batch queries
- Point cloud loading and 2-D partition plots
"""

from .kdtree import KDSearchArray, TreeArray, build_tree
from .partition import get_partitioner
from .point_cloud import PointCloud
from .search import brute_force_search, find_many, range_search
from .visualization import plot_partition, plot_query

__version__ = "1.0.0"
__all__ = ["KDSearchArray", "TreeArray", "build_tree", "get_partitioner", "PointCloud",
           "brute_force_search", "find_many", "range_search", "plot_partition", "plot_query"]
