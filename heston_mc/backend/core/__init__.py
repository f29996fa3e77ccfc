from heston_mc.backend.core.errors import (
    HestonEngineError,
    ConfigurationError,
    NumericDomainError,
)
from heston_mc.backend.core.parameters import (
    SimulationParameters,
    get_default_params,
    get_default_barrier_params,
    KNOCK_OUT,
    KNOCK_IN,
)
from heston_mc.backend.core.config import (
    EngineConfig,
    VANILLA_KERNEL,
    BARRIER_KERNEL,
    KERNELS,
)

__all__ = [
    "HestonEngineError",
    "ConfigurationError",
    "NumericDomainError",
    "SimulationParameters",
    "get_default_params",
    "get_default_barrier_params",
    "KNOCK_OUT",
    "KNOCK_IN",
    "EngineConfig",
    "VANILLA_KERNEL",
    "BARRIER_KERNEL",
    "KERNELS",
]
