from heston_mc.backend.solvers.analytical import AnalyticalPricer
from heston_mc.backend.solvers.monte_carlo import MonteCarloSimulator, SimulationReport

__all__ = ["AnalyticalPricer", "MonteCarloSimulator", "SimulationReport"]
