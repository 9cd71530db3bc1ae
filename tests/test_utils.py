import numpy as np
import pytest

from kdsearch.utils import as_box, as_points, next_power_of_two, time_function


@pytest.mark.parametrize("n, expected", [(0, 1), (1, 1), (2, 2), (3, 4), (5, 8), (1024, 1024), (1025, 2048)])
def test_next_power_of_two(n, expected):
    assert next_power_of_two(n) == expected


def test_time_function_reports_top_level_call_once(capsys):
    @time_function
    def countdown(n):
        return 0 if n == 0 else 1 + countdown(n - 1)

    assert countdown(5) == 5
    out = capsys.readouterr().out
    assert out.count("countdown took") == 1


def test_time_function_resets_after_error(capsys):
    @time_function
    def fail():
        raise MemoryError

    with pytest.raises(MemoryError):
        fail()
    assert fail._in_call is False


def test_as_points_views_arrays():
    values = np.zeros((4, 2))
    assert np.shares_memory(as_points(values), values)
    assert as_points(values, count=2).shape == (2, 2)


def test_as_box_flattens():
    lower, upper = as_box([[1, 2]], (3, 4), 2)
    assert lower.tolist() == [1, 2]
    assert upper.tolist() == [3, 4]
