from typing import Tuple, Dict
import math
import numpy as np

from .common import (
    get_default_params,
    run_mc,
    PathSimulator,
    PayoffEvaluator,
    PayoffAccumulator,
    RandomStream,
    VANILLA_KERNEL,
)


def check_accumulation_order_invariance() -> Tuple[bool, str, Dict]:
    """
    Summing the same payoffs in a different order and grouping only moves
    the total by floating-point rounding.
    """
    params = get_default_params()
    outcome = PathSimulator(params, num_steps=20).simulate_batch(RandomStream(12), 50_000)
    call, put = PayoffEvaluator(params, VANILLA_KERNEL).evaluate(outcome.final_prices)

    in_order = PayoffAccumulator()
    in_order.add(call, put)

    rng = np.random.default_rng(0)
    permutation = rng.permutation(call.size)
    cuts = np.sort(rng.choice(np.arange(1, call.size), size=37, replace=False))

    partials = []
    for idx in np.split(permutation, cuts):
        partial = PayoffAccumulator()
        partial.add(call[idx], put[idx])
        partials.append(partial)

    shuffled = PayoffAccumulator()
    for partial in reversed(partials):
        shuffled.merge(partial)

    call_diff = abs(in_order.call_sum - shuffled.call_sum)
    put_diff = abs(in_order.put_sum - shuffled.put_sum)

    passed = (
        shuffled.count == in_order.count
        and math.isclose(in_order.call_sum, shuffled.call_sum, rel_tol=1e-12)
        and math.isclose(in_order.put_sum, shuffled.put_sum, rel_tol=1e-12)
    )
    message = f"call diff={call_diff:.3e}, put diff={put_diff:.3e}"
    details = {'call_diff': call_diff, 'put_diff': put_diff, 'groups': len(partials)}

    return passed, message, details


def check_worker_count_invariance() -> Tuple[bool, str, Dict]:
    """Partials merge in generator order, so thread count cannot change the result."""
    params = get_default_params()
    sim = dict(num_paths=6_000, num_steps=30, num_rngs=4, num_sims=500, seed=5)

    single = run_mc(params, num_workers=1, **sim)
    pooled = run_mc(params, num_workers=4, **sim)

    passed = single.call_price == pooled.call_price and single.put_price == pooled.put_price
    message = f"1 worker call={single.call_price:.6f}, 4 workers call={pooled.call_price:.6f}"
    details = {'single_call': single.call_price, 'pooled_call': pooled.call_price}

    return passed, message, details


def test_accumulation_order_invariance():
    passed, message, _ = check_accumulation_order_invariance()
    assert passed, message


def test_worker_count_invariance():
    passed, message, _ = check_worker_count_invariance()
    assert passed, message


def test_accumulator_add_and_merge():
    a = PayoffAccumulator()
    a.add([1.0, 2.0], [0.0, 3.0])
    b = PayoffAccumulator()
    b.add([4.0], [5.0])

    a.merge(b)

    assert a.count == 3
    assert a.call_sum == 7.0
    assert a.put_sum == 8.0
    assert a.call_sq_sum == 21.0
    assert a.put_sq_sum == 34.0
