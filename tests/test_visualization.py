import numpy as np
import pytest

from kdsearch import KDSearchArray, plot_partition, plot_query


class TestPlotPartition:
    def test_one_line_per_node(self, tmp_path, sample_points):
        index = KDSearchArray(dimension=2)
        index.prepare(sample_points)
        save_path = tmp_path / "partition.png"

        result = index.find(sample_points, (2, 0), (4, 4))
        lines = plot_partition(sample_points, index, query=((2, 0), (4, 4)), result=result,
                               save_path=save_path, show=False)
        assert lines == 6
        assert save_path.exists()

    def test_requires_two_dimensions(self, tmp_path):
        points = np.random.default_rng(0).uniform(size=(10, 3))
        index = KDSearchArray()
        index.prepare(points)
        with pytest.raises(ValueError):
            plot_partition(points, index, save_path=tmp_path / "p.png", show=False)

    def test_requires_prepared_index(self, tmp_path, sample_points):
        with pytest.raises(RuntimeError):
            plot_partition(sample_points, KDSearchArray(), save_path=tmp_path / "p.png", show=False)


class TestPlotQuery:
    def test_saves_plot(self, tmp_path, sample_points):
        save_path = tmp_path / "query.png"
        plot_query(sample_points, ((4, 2), (10, 5)), [2, 3, 5], save_path=save_path, show=False)
        assert save_path.exists()

    def test_empty_result(self, tmp_path, sample_points):
        save_path = tmp_path / "empty.png"
        plot_query(sample_points, ((100, 100), (200, 200)), [], save_path=save_path, show=False)
        assert save_path.exists()
