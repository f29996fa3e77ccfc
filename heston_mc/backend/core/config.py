"""
Engine configuration.

The kernel name selects the payoff logic; the remaining fields size the
simulation. N paths are spread over `num_rngs` generators, each feeding
`num_sims` concurrent paths per round, so the number of rounds is

    num_simgroups = ceil(N / (num_rngs · num_sims))

Tuning:
    num_rngs  - generator count (more parallel streams, more state)
    num_sims  - per-generator batch size (larger buffers, fewer rounds)
    num_paths - total sample count; estimator variance ∝ 1/N
"""

import math
import numbers
from dataclasses import dataclass, asdict, fields
from typing import Any, Dict, Optional

from heston_mc.backend.core.errors import ConfigurationError

VANILLA_KERNEL = 'europeanVanilla'
BARRIER_KERNEL = 'europeanBarrier'
KERNELS = (VANILLA_KERNEL, BARRIER_KERNEL)

DEFAULT_NUM_PATHS = 512
DEFAULT_NUM_STEPS = 100
DEFAULT_NUM_RNGS = 2
DEFAULT_NUM_SIMS = 64
DEFAULT_SEED = 42
DEFAULT_TOLERANCE = 0.01


def _is_integer(value) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def _coerce_int(key: str, value) -> int:
    """Whole floats and digit strings convert; 12.5 and booleans are rejected."""
    if _is_integer(value) or (isinstance(value, float) and value.is_integer()):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            raise ConfigurationError(key, value, "must be an integer") from None
    raise ConfigurationError(key, value, "must be an integer")


@dataclass(frozen=True)
class EngineConfig:
    """Construction-time configuration of a Monte Carlo run."""

    kernel: str
    num_paths: int = DEFAULT_NUM_PATHS
    expected_call: Optional[float] = None
    expected_put: Optional[float] = None
    num_steps: int = DEFAULT_NUM_STEPS
    num_rngs: int = DEFAULT_NUM_RNGS
    num_sims: int = DEFAULT_NUM_SIMS
    seed: int = DEFAULT_SEED
    num_workers: Optional[int] = None
    tolerance: float = DEFAULT_TOLERANCE

    def __post_init__(self):
        if self.kernel not in KERNELS:
            raise ConfigurationError('kernel', self.kernel, f"expected one of {KERNELS}")

        for name in ('num_paths', 'num_steps', 'num_rngs', 'num_sims'):
            value = getattr(self, name)
            if not _is_integer(value) or value < 1:
                raise ConfigurationError(name, value, "must be a positive integer")

        if not _is_integer(self.seed) or self.seed < 0:
            raise ConfigurationError('seed', self.seed, "must be a non-negative integer")

        if self.num_workers is not None and (
                not _is_integer(self.num_workers) or self.num_workers < 1):
            raise ConfigurationError('num_workers', self.num_workers, "must be a positive integer")

        if not math.isfinite(self.tolerance) or self.tolerance < 0:
            raise ConfigurationError('tolerance', self.tolerance, "must be non-negative")

    @property
    def is_barrier(self) -> bool:
        return self.kernel == BARRIER_KERNEL

    @property
    def paths_per_round(self) -> int:
        return self.num_rngs * self.num_sims

    @property
    def num_simgroups(self) -> int:
        """Rounds needed to cover num_paths; the last one may be partial."""
        return -(-self.num_paths // self.paths_per_round)

    @property
    def worker_count(self) -> int:
        """Worker pool size; never more workers than generators."""
        if self.num_workers is None:
            return self.num_rngs
        return min(self.num_workers, self.num_rngs)

    @property
    def verifying(self) -> bool:
        return self.expected_call is not None or self.expected_put is not None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'EngineConfig':
        """Build from a loosely typed mapping (JSON body, CLI namespace); unknown keys are rejected."""
        unknown = sorted(set(d) - {f.name for f in fields(cls)})
        if unknown:
            raise ConfigurationError(unknown[0], d[unknown[0]], "unknown configuration field")
        if 'kernel' not in d or d['kernel'] is None:
            raise ConfigurationError('kernel', None, "kernel name is required")

        def opt_float(key):
            value = d.get(key)
            return None if value is None else float(value)

        def opt_int(key, default):
            value = d.get(key)
            return default if value is None else _coerce_int(key, value)

        workers = d.get('num_workers')
        return cls(
            kernel=d['kernel'],
            num_paths=opt_int('num_paths', DEFAULT_NUM_PATHS),
            expected_call=opt_float('expected_call'),
            expected_put=opt_float('expected_put'),
            num_steps=opt_int('num_steps', DEFAULT_NUM_STEPS),
            num_rngs=opt_int('num_rngs', DEFAULT_NUM_RNGS),
            num_sims=opt_int('num_sims', DEFAULT_NUM_SIMS),
            seed=opt_int('seed', DEFAULT_SEED),
            num_workers=None if workers is None else _coerce_int('num_workers', workers),
            tolerance=DEFAULT_TOLERANCE if d.get('tolerance') is None else float(d['tolerance']),
        )
