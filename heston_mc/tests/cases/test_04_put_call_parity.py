from typing import Tuple, Dict
import numpy as np

from .common import get_default_params, run_mc, AnalyticalPricer


def check_mc_put_call_parity() -> Tuple[bool, str, Dict]:
    """
    Monte Carlo put-call parity:

    C - P = S₀ - K·e^{-rT}

    Per path call - put = S_T - K exactly, so the estimate only differs
    from parity by the sampling error of the discounted mean of S_T.
    """
    params = get_default_params()
    report = run_mc(params, num_paths=40_000, num_steps=50, num_rngs=4, num_sims=2_500, seed=17)

    parity_theoretical = params.S0 - params.K * np.exp(-params.r * params.T)
    parity_actual = report.call_price - report.put_price
    error = abs(parity_actual - parity_theoretical)

    passed = error < 0.5
    message = f"Error = {error:.6f}"
    details = {
        'call': report.call_price,
        'put': report.put_price,
        'theoretical': parity_theoretical,
        'actual': parity_actual,
        'error': error
    }

    return passed, message, details


def check_reference_put_call_parity() -> Tuple[bool, str, Dict]:
    params = get_default_params()
    call, put = AnalyticalPricer(params).prices()

    parity_theoretical = params.S0 - params.K * np.exp(-params.r * params.T)
    error = abs((call - put) - parity_theoretical)

    passed = error < 1e-8
    message = f"Error = {error:.2e}"
    details = {'call': call, 'put': put, 'error': error}

    return passed, message, details


def test_mc_put_call_parity():
    passed, message, _ = check_mc_put_call_parity()
    assert passed, message


def test_reference_put_call_parity():
    passed, message, _ = check_reference_put_call_parity()
    assert passed, message
