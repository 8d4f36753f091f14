import numpy as np
import pytest

from blust.utils import (
    AllocStats,
    format_matrix,
    format_vector,
    get_bytesize,
    randomize,
    swap_32,
)


def test_alloc_stats_tracks_peak():
    s = AllocStats()
    s.inc_allocs(3)
    s.inc_allocs(-2)
    assert s.n_allocs == 1
    assert s.max_allocs == 3


def test_shared_stats_tracks_peak():
    s = AllocStats()
    s.inc_shared(2)
    s.inc_shared(1)
    s.inc_shared(-3)
    assert s.n_shared == 0
    assert s.max_shared == 3
    assert s.n_allocs == 0


def test_format_vector():
    assert format_vector([1, 2, 3]) == "[1, 2, 3]"


def test_format_vector_empty():
    assert format_vector([]) == "[]"


def test_format_vector_single_has_no_separator():
    assert format_vector([7]) == "[7]"


def test_randomize_bounds_and_length():
    values = randomize(100, 16)
    assert len(values) == 100
    assert values.dtype == np.float32
    assert np.all(np.abs(values) <= 0.25)


def test_randomize_successive_calls_differ():
    a = randomize(20, 4, seed=5)
    b = randomize(20, 4, seed=5)
    assert not np.array_equal(a, b)


def test_randomize_rejects_zero_input_size():
    with pytest.raises(ValueError):
        randomize(3, 0)


def test_swap_32_value():
    assert swap_32(0x01020304) == 0x04030201


@pytest.mark.parametrize("value", [0, 1, 255, 0x7F000000, -1, -123456, 2051])
def test_swap_32_round_trip(value):
    assert swap_32(swap_32(value)) == value


@pytest.mark.parametrize("count", [0, 1, 7, 8, 9, 100])
def test_get_bytesize_is_aligned(count):
    size = get_bytesize(count)
    assert size % 32 == 0
    assert count * 4 <= size < count * 4 + 32


def test_get_bytesize_custom_alignment():
    size = get_bytesize(3, alignment=16, itemsize=8)
    assert size % 16 == 0
    assert 24 <= size < 40


def test_format_matrix_layout():
    text = format_matrix([1, 2, 3, 4, 5, 6], 2, 3)
    lines = text.splitlines()
    assert lines[0] == "<matrix: dtype=float dim=2x3>"
    assert len(lines) == 3
    assert lines[1].endswith("],")
    assert lines[2].endswith("]") and not lines[2].endswith("],")
    assert "1.00" in lines[1] and "6.00" in lines[2]


def test_format_matrix_too_few_values():
    with pytest.raises(ValueError):
        format_matrix([1, 2, 3], 2, 2)