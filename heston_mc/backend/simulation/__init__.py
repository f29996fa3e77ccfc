from heston_mc.backend.simulation.random_stream import (
    RandomStream,
    RandomStreamState,
    box_muller,
    correlate,
    spawn_streams,
)
from heston_mc.backend.simulation.path import (
    PathState,
    PathBatch,
    PathOutcome,
    BatchOutcome,
    PathSimulator,
    euler_step,
)
from heston_mc.backend.simulation.payoff import PayoffEvaluator
from heston_mc.backend.simulation.aggregator import (
    PayoffAccumulator,
    PricingResult,
    ResultAggregator,
    VerificationMismatch,
    VerificationReport,
)
from heston_mc.backend.simulation.scheduler import SimulationGroupScheduler, plan_batches

__all__ = [
    "RandomStream",
    "RandomStreamState",
    "box_muller",
    "correlate",
    "spawn_streams",
    "PathState",
    "PathBatch",
    "PathOutcome",
    "BatchOutcome",
    "PathSimulator",
    "euler_step",
    "PayoffEvaluator",
    "PayoffAccumulator",
    "PricingResult",
    "ResultAggregator",
    "VerificationMismatch",
    "VerificationReport",
    "SimulationGroupScheduler",
    "plan_batches",
]
