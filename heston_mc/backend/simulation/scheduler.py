"""
Simulation Group Scheduler: Fan-out over Generators, Fan-in of Payoffs

═══════════════════════════════════════════════════════════════════════════════
DECOMPOSITION
═══════════════════════════════════════════════════════════════════════════════

   N paths = NUM_SIMGROUPS rounds × R generators × NUM_SIMS paths

   for group in range(NUM_SIMGROUPS):          # sequential rounds
       for g in range(R):                      # one worker per generator
           batch of NUM_SIMS paths fed by stream g
           payoffs → partial accumulator of g

   total = merge(partial_0, …, partial_{R-1})

Every round except possibly the last is full. The last one spreads the
remainder r = N mod (R·NUM_SIMS) over the generators, the first r mod R
generators taking one extra path.

OWNERSHIP:
   Each stream is driven by exactly one task for the whole run; tasks
   never share a stream or an accumulator. Partials are merged in
   generator order once all tasks finish, so the estimate is independent
   of thread count and completion order.

═══════════════════════════════════════════════════════════════════════════════
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List

from heston_mc.backend.core.config import EngineConfig
from heston_mc.backend.core.parameters import SimulationParameters
from heston_mc.backend.simulation.aggregator import PayoffAccumulator
from heston_mc.backend.simulation.path import PathSimulator
from heston_mc.backend.simulation.payoff import PayoffEvaluator
from heston_mc.backend.simulation.random_stream import RandomStream, spawn_streams

logger = logging.getLogger(__name__)


def plan_batches(num_paths: int, num_rngs: int, num_sims: int) -> List[List[int]]:
    """
    Batch sizes per round and generator.

    Returns:
        rounds[group][generator] = number of paths, summing to num_paths
    """
    per_round = num_rngs * num_sims
    full_rounds, remainder = divmod(num_paths, per_round)

    rounds = [[num_sims] * num_rngs for _ in range(full_rounds)]
    if remainder:
        base, extra = divmod(remainder, num_rngs)
        rounds.append([base + (1 if g < extra else 0) for g in range(num_rngs)])
    return rounds


class SimulationGroupScheduler:
    """Runs all rounds of a configured simulation and returns the summed payoffs."""

    def __init__(self, params: SimulationParameters, config: EngineConfig):
        self.p = params
        self.config = config
        self.simulator = PathSimulator(params, config.num_steps, monitor_barrier=config.is_barrier)
        self.evaluator = PayoffEvaluator(params, config.kernel)
        self.plan = plan_batches(config.num_paths, config.num_rngs, config.num_sims)

    @property
    def num_simgroups(self) -> int:
        return len(self.plan)

    def _drive_generator(self, index: int, stream: RandomStream) -> PayoffAccumulator:
        """All rounds for one generator; returns that generator's partial sums."""
        partial = PayoffAccumulator()
        for group, round_sizes in enumerate(self.plan):
            n = round_sizes[index]
            if n == 0:
                continue
            outcome = self.simulator.simulate_batch(stream, n)
            call, put = self.evaluator.evaluate(outcome.final_prices, outcome.barrier_breached)
            partial.add(call, put)
            logger.debug("generator %d finished group %d (%d paths)", index, group, n)
        return partial

    def run(self) -> PayoffAccumulator:
        cfg = self.config
        logger.info(
            "kernel=%s paths=%d steps=%d generators=%d batch=%d groups=%d workers=%d",
            cfg.kernel, cfg.num_paths, cfg.num_steps, cfg.num_rngs,
            cfg.num_sims, self.num_simgroups, cfg.worker_count,
        )

        streams = spawn_streams(cfg.seed, cfg.num_rngs)

        with ThreadPoolExecutor(max_workers=cfg.worker_count) as pool:
            futures = [
                pool.submit(self._drive_generator, index, stream)
                for index, stream in enumerate(streams)
            ]
            partials = [future.result() for future in futures]

        total = PayoffAccumulator()
        for partial in partials:
            total.merge(partial)
        return total
