"""Visualization utilities for 2-D kd-tree partitions and range queries."""

import matplotlib.pyplot as plt
from matplotlib.patches import Rectangle
import numpy as np

from .utils import as_points


def _split_lines(values, tree, index, depth, lower, upper, lines):
    x = tree[index]
    if x is None:
        return
    d = depth % 2
    split = values[x, d]
    if d == 0:
        lines.append(((split, split), (lower[1], upper[1]), d))
    else:
        lines.append(((lower[0], upper[0]), (split, split), d))

    left_upper = upper.copy()
    left_upper[d] = split
    right_lower = lower.copy()
    right_lower[d] = split
    _split_lines(values, tree, 2 * index + 1, depth + 1, lower, left_upper, lines)
    _split_lines(values, tree, 2 * index + 2, depth + 1, right_lower, upper, lines)


def plot_partition(points, index, query=None, result=None, save_path='kd_partition.png', show=True):
    """
    Plot the splitting lines of a prepared 2-D kd-tree.

    Args:
        points: Point collection the index was prepared with
        index: Prepared KDSearchArray
        query: Optional (query_min, query_max) box to draw
        result: Optional indices to highlight (e.g. output of find)
        save_path: Path to save the plot
        show: Whether to open the plot window

    Returns:
        Number of splitting lines drawn
    """
    values = as_points(points)
    if values.shape[1] != 2:
        raise ValueError(f"Partition plots need 2-D points, got {values.shape[1]}-D")
    if not index.is_prepared:
        raise RuntimeError("KDSearchArray is not prepared; call prepare() first")

    lower = values.min(axis=0).astype(float)
    upper = values.max(axis=0).astype(float)
    margin = np.maximum((upper - lower) * 0.05, 1.0)
    lower -= margin
    upper += margin

    lines = []
    _split_lines(values, index.tree, 0, 0, lower, upper, lines)

    fig, ax = plt.subplots(figsize=(9, 9))
    for xs, ys, d in lines:
        ax.plot(xs, ys, color='#2E86AB' if d == 0 else '#E07A5F', linewidth=1, alpha=0.8)

    ax.scatter(values[:, 0], values[:, 1], s=12, color='gray', label='Points', zorder=3)
    if result is not None and len(result):
        hits = values[np.asarray(result)]
        ax.scatter(hits[:, 0], hits[:, 1], s=24, color='red', label='In range', zorder=4)
    if query is not None:
        _draw_box(ax, query)

    ax.set_xlim(lower[0], upper[0])
    ax.set_ylim(lower[1], upper[1])
    ax.set_xlabel('x', fontsize=12)
    ax.set_ylabel('y', fontsize=12)
    ax.set_title(f'kd-tree partition ({len(values)} points, height {index.height})',
                 fontsize=14, fontweight='bold')
    ax.legend(loc='best')

    plt.tight_layout()
    plt.savefig(save_path, dpi=150)
    print(f"Partition plot saved to '{save_path}'")
    if show:
        plt.show()
    plt.close(fig)
    return len(lines)


def plot_query(points, query, result, save_path='kd_query.png', show=True):
    """
    Plot a 2-D range query and the points it returned.

    Args:
        points: Point collection
        query: (query_min, query_max) box
        result: Indices returned for the box
        save_path: Path to save the plot
        show: Whether to open the plot window
    """
    values = as_points(points)
    if values.shape[1] != 2:
        raise ValueError(f"Query plots need 2-D points, got {values.shape[1]}-D")

    mask = np.zeros(len(values), dtype=bool)
    mask[np.asarray(result, dtype=np.int64)] = True

    fig, ax = plt.subplots(figsize=(9, 9))
    ax.scatter(values[~mask, 0], values[~mask, 1], s=12, color='gray', label='Outside')
    ax.scatter(values[mask, 0], values[mask, 1], s=24, color='red', label=f'Inside ({mask.sum()})')
    _draw_box(ax, query)

    ax.set_xlabel('x', fontsize=12)
    ax.set_ylabel('y', fontsize=12)
    ax.set_title('Orthogonal range query', fontsize=14, fontweight='bold')
    ax.grid(True, alpha=0.3)
    ax.legend(loc='best')

    plt.tight_layout()
    plt.savefig(save_path, dpi=150)
    print(f"Query plot saved to '{save_path}'")
    if show:
        plt.show()
    plt.close(fig)


def _draw_box(ax, query):
    (x0, y0), (x1, y1) = np.asarray(query[0]), np.asarray(query[1])
    ax.add_patch(Rectangle((x0, y0), x1 - x0, y1 - y0, fill=False,
                           edgecolor='green', linestyle='--', linewidth=2, label='Query box'))
