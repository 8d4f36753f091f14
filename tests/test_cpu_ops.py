import numpy as np
import pytest

from blust.cpu_ops import CpuOps, get_ops, set_ops
from blust.tensor import Tensor


@pytest.fixture
def ops():
    return CpuOps(2)


def _random_tensor(rows, cols, seed):
    rng = np.random.default_rng(seed)
    return Tensor.from_values(rng.random((rows, cols), dtype=np.float32))


def test_add_small_values(ops):
    a = Tensor.from_values([1, 2])
    b = Tensor.from_values([3, 4])
    assert ops.add(a, b).data().tolist() == [4.0, 6.0]


def test_add_leaves_inputs_unchanged(ops):
    a = _random_tensor(3, 5, 1)
    b = _random_tensor(3, 5, 2)
    before = a.data().copy()
    res = ops.add(a, b)
    np.testing.assert_array_equal(a.data(), before)
    assert res.dim() == (3, 5)
    np.testing.assert_allclose(res.data(), a.data() + b.data(), rtol=1e-6)


def test_sub_then_add_round_trip(ops):
    a = _random_tensor(4, 4, 3)
    b = _random_tensor(4, 4, 4)
    back = ops.add(ops.sub(a, b), b)
    np.testing.assert_allclose(back.data(), a.data(), atol=1e-6)


def test_sub_of_itself_is_zero(ops):
    a = _random_tensor(2, 3, 5)
    assert not ops.sub(a, a).data().any()


def test_mul_and_div_round_trip(ops):
    a = _random_tensor(3, 3, 6)
    back = ops.div(ops.mul(a, 4.0), 4.0)
    np.testing.assert_allclose(back.data(), a.data(), rtol=1e-6)


def test_mul_by_zero(ops):
    a = _random_tensor(2, 2, 7)
    assert not ops.mul(a, 0.0).data().any()


def test_div_by_zero_gives_infinity(ops):
    a = Tensor.from_values([1.0, 2.0])
    assert np.isinf(ops.div(a, 0.0).data()).all()


def test_hadamard_matches_elementwise_product(ops):
    a = _random_tensor(3, 4, 8)
    b = _random_tensor(3, 4, 9)
    np.testing.assert_allclose(
        ops.hadamard(a, b).data(), a.data() * b.data(), rtol=1e-6
    )


def test_in_place_writes_into_first_operand(ops):
    a = Tensor.from_values([1.0, 2.0, 3.0])
    b = Tensor.from_values([1.0, 1.0, 1.0])
    res = ops.sub(a, b, False)
    assert a.data().tolist() == [0.0, 1.0, 2.0]
    assert res.data() is a.data()


def test_mismatched_dimensions_raise(ops):
    with pytest.raises(ValueError):
        ops.add(Tensor((2, 3)), Tensor((3, 2)))
    with pytest.raises(ValueError):
        ops.hadamard(Tensor((4,)), Tensor((5,)))


def test_threaded_path_matches_single_thread():
    threaded = CpuOps(4)
    threaded.thread_threshold = 10
    single = CpuOps(1)
    a = _random_tensor(7, 13, 10)
    b = _random_tensor(7, 13, 11)
    np.testing.assert_array_equal(
        threaded.add(a, b).data(), single.add(a, b).data()
    )
    np.testing.assert_array_equal(
        threaded.hadamard(a, b).data(), single.hadamard(a, b).data()
    )


def test_thread_count_is_at_least_one():
    assert CpuOps(0).ncores == CpuOps(1).ncores


def test_mat_mul_matches_numpy(ops):
    a = _random_tensor(17, 9, 12)
    b = _random_tensor(9, 11, 13)
    res = ops.mat_mul(a, b)
    assert res.dim() == (17, 11)
    expected = a.data().reshape(17, 9) @ b.data().reshape(9, 11)
    np.testing.assert_allclose(res.data().reshape(17, 11), expected, rtol=1e-4)


@pytest.mark.parametrize("mc,kc,nc", [(1, 1, 1), (3, 2, 5), (8, 8, 8), (256, 128, 256)])
def test_mat_mul_block_sizes_give_same_result(ops, mc, kc, nc):
    a = _random_tensor(10, 7, 14)
    b = _random_tensor(7, 9, 15)
    reference = ops.mat_mul(a, b)
    blocked = ops.mat_mul(a, b, mc, kc, nc)
    np.testing.assert_allclose(blocked.data(), reference.data(), rtol=1e-4)
    assert ops.block_sizes == (mc, kc, nc)


def test_mat_mul_identity(ops):
    a = _random_tensor(5, 5, 16)
    identity = Tensor.from_values(np.eye(5))
    np.testing.assert_allclose(ops.mat_mul(a, identity).data(), a.data(), rtol=1e-6)


def test_mat_mul_rejects_bad_shapes(ops):
    with pytest.raises(ValueError):
        ops.mat_mul(Tensor((2, 3)), Tensor((2, 3)))
    with pytest.raises(ValueError):
        ops.mat_mul(Tensor((6,)), Tensor((6, 1)))


def test_mat_mul_rejects_bad_block_sizes(ops):
    with pytest.raises(ValueError):
        ops.mat_mul(Tensor((2, 2)), Tensor((2, 2)), 0, 4, 4)


def test_transpose_round_trip(ops):
    a = _random_tensor(6, 3, 17)
    t = ops.transpose(a)
    assert t.dim() == (3, 6)
    np.testing.assert_array_equal(ops.transpose(t).data(), a.data())


def test_transpose_moves_elements(ops):
    a = Tensor.from_values([[1, 2, 3], [4, 5, 6]])
    assert ops.transpose(a).data().tolist() == [1.0, 4.0, 2.0, 5.0, 3.0, 6.0]


def test_transpose_requires_matrix(ops):
    with pytest.raises(ValueError):
        ops.transpose(Tensor((2, 2, 2)))


def test_global_ops_round_trip():
    backend = CpuOps(3)
    set_ops(backend)
    try:
        assert get_ops() is backend
    finally:
        set_ops(None)
    with pytest.raises(RuntimeError):
        get_ops()