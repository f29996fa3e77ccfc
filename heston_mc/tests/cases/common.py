import numpy as np
from scipy.stats import norm
from typing import Tuple

from heston_mc.backend.core.config import EngineConfig, VANILLA_KERNEL, BARRIER_KERNEL
from heston_mc.backend.core.errors import ConfigurationError, NumericDomainError
from heston_mc.backend.core.parameters import (
    SimulationParameters,
    get_default_params,
    get_default_barrier_params,
    KNOCK_IN,
    KNOCK_OUT,
)
from heston_mc.backend.simulation.aggregator import PayoffAccumulator, ResultAggregator
from heston_mc.backend.simulation.path import PathSimulator, euler_step
from heston_mc.backend.simulation.payoff import PayoffEvaluator
from heston_mc.backend.simulation.random_stream import RandomStream, box_muller, spawn_streams
from heston_mc.backend.simulation.scheduler import SimulationGroupScheduler, plan_batches
from heston_mc.backend.solvers.analytical import AnalyticalPricer
from heston_mc.backend.solvers.monte_carlo import MonteCarloSimulator

try:
    import QuantLib as ql
    QUANTLIB_AVAILABLE = True
except Exception:
    QUANTLIB_AVAILABLE = False


def with_params(params: SimulationParameters, **changes) -> SimulationParameters:
    d = params.to_dict()
    d.update(changes)
    return SimulationParameters.from_dict(d)


def run_mc(params: SimulationParameters, kernel: str = VANILLA_KERNEL, **config):
    return MonteCarloSimulator(params, EngineConfig(kernel=kernel, **config)).run()


def black_scholes_call(S: float, K: float, T: float, r: float, sigma: float) -> float:
    d1 = (np.log(S / K) + (r + 0.5 * sigma ** 2) * T) / (sigma * np.sqrt(T))
    d2 = d1 - sigma * np.sqrt(T)
    return S * norm.cdf(d1) - K * np.exp(-r * T) * norm.cdf(d2)


def quantlib_heston_prices(params: SimulationParameters, K: float, T: float) -> Tuple[float, float]:
    if not QUANTLIB_AVAILABLE:
        raise RuntimeError("QuantLib is not installed")

    evaluation_date = ql.Date(1, 1, 2026)
    ql.Settings.instance().evaluationDate = evaluation_date
    day_count = ql.Actual365Fixed()

    spot_handle = ql.QuoteHandle(ql.SimpleQuote(params.S0))
    risk_free_ts = ql.YieldTermStructureHandle(
        ql.FlatForward(evaluation_date, params.r, day_count)
    )
    dividend_ts = ql.YieldTermStructureHandle(
        ql.FlatForward(evaluation_date, 0.0, day_count)
    )

    heston_process = ql.HestonProcess(
        risk_free_ts,
        dividend_ts,
        spot_handle,
        params.V0,
        params.kappa,
        params.theta,
        params.xi,
        params.rho,
    )
    engine = ql.AnalyticHestonEngine(ql.HestonModel(heston_process))

    maturity_date = evaluation_date + int(round(T * 365))
    exercise = ql.EuropeanExercise(maturity_date)

    prices = []
    for option_type in (ql.Option.Call, ql.Option.Put):
        option = ql.VanillaOption(ql.PlainVanillaPayoff(option_type, K), exercise)
        option.setPricingEngine(engine)
        prices.append(float(option.NPV()))
    return prices[0], prices[1]
