"""
═══════════════════════════════════════════════════════════════════════════════
HESTON MC - Monte Carlo Pricing of European Vanilla and Barrier Options
═══════════════════════════════════════════════════════════════════════════════

Monte Carlo estimation of European vanilla and barrier option prices under
the Heston (1993) stochastic volatility model.

Mathematical Model:
    dS = rS dt + √V S dW_S
    dV = κ(θ-V)dt + ξ√V dW_V
    Corr(dW_S, dW_V) = ρ

Modules:
    backend.core        - Parameters, engine configuration, errors, logging
    backend.simulation  - Random streams, paths, payoffs, scheduler, aggregator
    backend.solvers     - Monte Carlo engine and semi-analytical reference
    backend.app         - Flask API
    tests               - Validation tests

Usage:
    from heston_mc import EngineConfig, MonteCarloSimulator, get_default_params

    params = get_default_params()
    config = EngineConfig(kernel='europeanVanilla', num_paths=100_000)
    result = MonteCarloSimulator(params, config).price()
    print(result.call_price, result.put_price)

═══════════════════════════════════════════════════════════════════════════════
"""

__version__ = '1.0.0'
__author__ = 'Heston MC'

from heston_mc.backend.core.config import EngineConfig
from heston_mc.backend.core.errors import ConfigurationError, NumericDomainError
from heston_mc.backend.core.parameters import (
    SimulationParameters,
    get_default_params,
    get_default_barrier_params,
)
from heston_mc.backend.solvers.analytical import AnalyticalPricer
from heston_mc.backend.solvers.monte_carlo import MonteCarloSimulator
