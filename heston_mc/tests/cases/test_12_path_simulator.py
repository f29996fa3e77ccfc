import warnings
from typing import Tuple, Dict
import numpy as np
import pytest

from .common import (
    ConfigurationError,
    PathSimulator,
    RandomStream,
    euler_step,
    get_default_params,
    get_default_barrier_params,
    with_params,
)


def check_path_simulator_stability() -> Tuple[bool, str, Dict]:
    """
    High vol-of-vol with a badly violated Feller condition drives the raw
    variance negative on many steps. Full truncation must keep every price
    positive and finite.
    """
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        params = with_params(get_default_params(), kappa=0.5, theta=0.04, xi=1.5, V0=0.01)

    simulator = PathSimulator(params, num_steps=200)
    outcome = simulator.simulate_batch(RandomStream(13), 5_000)
    prices = outcome.final_prices

    finite = bool(np.all(np.isfinite(prices)))
    positive = bool(np.all(prices > 0))
    passed = finite and positive

    message = f"min={prices.min():.4f}, max={prices.max():.4f}, finite={finite}"
    details = {
        'min_price': float(prices.min()),
        'max_price': float(prices.max()),
        'finite': finite,
        'positive': positive,
    }

    return passed, message, details


def test_path_simulator_stability():
    passed, message, _ = check_path_simulator_stability()
    assert passed, message


def test_scalar_path_matches_batch_of_one():
    params = get_default_barrier_params()
    simulator = PathSimulator(params, num_steps=50, monitor_barrier=True)

    scalar = simulator.simulate(RandomStream(5))
    batch = simulator.simulate_batch(RandomStream(5), 1)

    assert scalar.final_price == pytest.approx(float(batch.final_prices[0]), rel=1e-12)
    assert scalar.barrier_breached == bool(batch.barrier_breached[0])


def test_negative_variance_is_truncated():
    params = get_default_params()
    dt = 0.01

    price, variance = euler_step(100.0, -0.02, 3.0, -3.0, dt, params)

    assert price == pytest.approx(100.0 * np.exp(params.r * dt))
    assert variance == pytest.approx(-0.02 + params.kappa * params.theta * dt)


def test_zero_vol_of_vol_gives_lognormal_drift():
    params = with_params(get_default_params(), xi=0.0, V0=0.04, theta=0.04)
    outcome = PathSimulator(params, num_steps=20).simulate_batch(RandomStream(1), 100)

    log_returns = np.log(outcome.final_prices / params.S0)
    # ln S_T ~ N((r - V/2)T, V·T) with V constant
    assert log_returns.mean() == pytest.approx((params.r - 0.5 * params.V0) * params.T, abs=0.06)


def test_barrier_flag_is_sticky():
    params = get_default_barrier_params()
    simulator = PathSimulator(params, num_steps=10, monitor_barrier=True)

    state = simulator.start()
    assert not state.barrier_breached

    simulator.step(state, 5.0, 0.0)
    assert state.price >= params.upper_barrier
    assert state.barrier_breached

    simulator.step(state, -5.0, 0.0)
    assert params.lower_barrier < state.price < params.upper_barrier
    assert state.barrier_breached


def test_barrier_at_spot_breaches_at_start():
    params = with_params(get_default_params(), lower_barrier=100.0)
    simulator = PathSimulator(params, num_steps=5, monitor_barrier=True)

    assert simulator.start().barrier_breached
    assert simulator.simulate_batch(RandomStream(0), 10).barrier_breached.all()


def test_unmonitored_paths_never_breach():
    params = get_default_barrier_params()
    outcome = PathSimulator(params, num_steps=20).simulate_batch(RandomStream(3), 500)
    assert not outcome.barrier_breached.any()


def test_monitoring_requires_barrier():
    with pytest.raises(ConfigurationError):
        PathSimulator(get_default_params(), num_steps=10, monitor_barrier=True)


def test_one_pair_per_step():
    stream = RandomStream(8)
    PathSimulator(get_default_params(), num_steps=25).simulate_batch(stream, 40)
    assert stream.pairs_drawn == 25 * 40
