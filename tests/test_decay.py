import pytest

from blust.decay import BaseDecay, ConstantDecay, ExponentialDecay


def test_base_decay_is_abstract():
    with pytest.raises(TypeError):
        BaseDecay()


def test_constant_decay_returns_rate_for_any_step():
    decay = ConstantDecay(0.5)
    assert [decay.learning_rate(s) for s in (0, 1, 1000, 10**6)] == [0.5] * 4


def test_constant_decay_default_rate():
    assert ConstantDecay().learning_rate(0) == pytest.approx(0.1)


def test_exponential_decay_constant_within_first_period():
    decay = ExponentialDecay(rate=0.3, decay=0.5, decay_steps=10)
    assert decay.learning_rate(0) == pytest.approx(0.3)
    assert decay.learning_rate(9) == pytest.approx(0.3)


def test_exponential_decay_ratio_between_periods():
    decay = ExponentialDecay(rate=0.8, decay=0.9, decay_steps=100)
    for period in range(1, 5):
        ratio = decay.learning_rate(period * 100) / decay.learning_rate((period - 1) * 100)
        assert ratio == pytest.approx(0.9)


def test_exponential_decay_steps_are_whole_periods():
    decay = ExponentialDecay(rate=1.0, decay=0.5, decay_steps=10)
    assert decay.learning_rate(10) == decay.learning_rate(19)
    assert decay.learning_rate(25) == pytest.approx(0.25)


def test_exponential_decay_is_non_increasing():
    decay = ExponentialDecay()
    rates = [decay.learning_rate(s) for s in range(0, 5000, 250)]
    assert all(a >= b for a, b in zip(rates, rates[1:]))
    assert rates[0] == pytest.approx(0.1)


def test_exponential_decay_rejects_zero_steps():
    with pytest.raises(ValueError):
        ExponentialDecay(decay_steps=0)


@pytest.mark.parametrize("decay", [ConstantDecay(), ExponentialDecay()])
def test_negative_step_rejected(decay):
    with pytest.raises(ValueError):
        decay.learning_rate(-1)