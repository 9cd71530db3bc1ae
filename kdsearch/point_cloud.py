"""Point collection loading for the kd-tree index."""

from pathlib import Path

import numpy as np

TEXT_FORMATS = ('.csv', '.txt')


class PointCloud:
    """Holds an (M, K) array of points, addressed by row index."""

    def __init__(self, points):
        """
        Initialize a point cloud from an array of points.

        Args:
            points: (M, K) array or sequence of K-tuples
        """
        self.points = np.asarray(points)
        if self.points.ndim != 2:
            raise ValueError(f"Points must have shape (M, K), got {self.points.shape}")

    @classmethod
    def from_array(cls, points):
        return cls(points)

    @classmethod
    def from_file(cls, filepath):
        """
        Load points from file.

        .csv and .txt files are read as delimited numbers, one point per row.
        Other formats (.ply, .pcd, .xyz, ...) are read with Open3D and give
        3-D points.
        """
        suffix = Path(filepath).suffix.lower()
        if suffix in TEXT_FORMATS:
            delimiter = ',' if suffix == '.csv' else None
            return cls(np.loadtxt(filepath, delimiter=delimiter, ndmin=2))

        import open3d as o3d
        pcd = o3d.io.read_point_cloud(str(filepath))
        return cls(np.asarray(pcd.points))

    @classmethod
    def random(cls, count, dimension=2, low=0.0, high=1.0, seed=None):
        """Uniformly distributed points in [low, high) on every axis."""
        rng = np.random.default_rng(seed)
        return cls(rng.uniform(low, high, size=(count, dimension)))

    @property
    def dimension(self):
        return self.points.shape[1]

    def bounds(self):
        """
        Bounding box of the cloud.

        Returns:
            Tuple of (minimum corner, maximum corner)
        """
        if self.points.shape[0] == 0:
            raise ValueError("Bounds of an empty point cloud are undefined")
        return self.points.min(axis=0), self.points.max(axis=0)

    def save(self, filepath):
        """Write the points as delimited text (.csv uses commas)."""
        delimiter = ',' if Path(filepath).suffix.lower() == '.csv' else ' '
        np.savetxt(filepath, self.points, delimiter=delimiter)

    def __len__(self):
        return len(self.points)
