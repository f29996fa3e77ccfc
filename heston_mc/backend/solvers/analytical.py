"""
Heston Semi-Analytical Reference Prices via Fourier Inversion

═══════════════════════════════════════════════════════════════════════════════
CHARACTERISTIC FUNCTION APPROACH
═══════════════════════════════════════════════════════════════════════════════

1. CALL PRICE:
   C = S₀·P₁ - K·e^{-rT}·P₂

   P₁ = ½ + (1/π)∫₀^∞ Re[e^{-iu·ln K}·φ(u - i) / (iu·φ(-i))] du
   P₂ = ½ + (1/π)∫₀^∞ Re[e^{-iu·ln K}·φ(u) / (iu)] du

   φ(-i) = E[S_T] = S₀·e^{rT}

2. CHARACTERISTIC FUNCTION OF ln S_T ("little trap" form):
   ═══════════════════════════════════════════════════════════════════════════

   β = κ - ρξ·iu
   d = √(β² + ξ²(u² + iu))           Re(d) ≥ 0
   g = (β - d)/(β + d)

   C(u) = iu(ln S₀ + rT) + (κθ/ξ²)[(β - d)T - 2·ln((1 - g·e^{-dT})/(1 - g))]
   D(u) = ((β - d)/ξ²)·(1 - e^{-dT})/(1 - g·e^{-dT})

   φ(u) = exp(C(u) + D(u)·V₀)

   Writing the solution with e^{-dT} (Albrecher et al. 2007) keeps the
   complex logarithm on its principal branch for all u.

3. PUT PRICE:
   P = C - S₀ + K·e^{-rT}   (put–call parity)

═══════════════════════════════════════════════════════════════════════════════
"""

import numpy as np
from scipy.integrate import quad
from typing import Optional, Tuple

from heston_mc.backend.core.errors import ConfigurationError
from heston_mc.backend.core.parameters import SimulationParameters


class AnalyticalPricer:
    """
    Heston (1993) semi-analytical European prices, used as the reference
    the Monte Carlo estimates are checked against. Barrier levels on the
    parameters are ignored.
    """

    def __init__(self, params: SimulationParameters):
        if params.xi <= 0:
            raise ConfigurationError('xi', params.xi, "reference pricer needs positive vol-of-vol")
        self.p = params

        # Integration parameters
        self.u_max = 150.0
        self.quad_limit = 200

    def characteristic_function(self, u: complex, tau: float) -> complex:
        kappa, theta, xi, rho = self.p.kappa, self.p.theta, self.p.xi, self.p.rho

        beta = kappa - rho * xi * 1j * u
        d = np.sqrt(beta ** 2 + xi ** 2 * (u ** 2 + 1j * u))
        g = (beta - d) / (beta + d)
        exp_neg_d_tau = np.exp(-d * tau)

        C = 1j * u * (np.log(self.p.S0) + self.p.r * tau)
        C += (kappa * theta / xi ** 2) * (
            (beta - d) * tau - 2.0 * np.log((1.0 - g * exp_neg_d_tau) / (1.0 - g))
        )
        D = ((beta - d) / xi ** 2) * (1.0 - exp_neg_d_tau) / (1.0 - g * exp_neg_d_tau)

        return np.exp(C + D * self.p.V0)

    def _integrand_P1(self, u: float, log_K: float, tau: float) -> float:
        if u < 1e-10:
            return 0.0
        forward = self.p.S0 * np.exp(self.p.r * tau)
        phi = self.characteristic_function(u - 1j, tau) / forward
        return np.real(np.exp(-1j * u * log_K) * phi / (1j * u))

    def _integrand_P2(self, u: float, log_K: float, tau: float) -> float:
        if u < 1e-10:
            return 0.0
        phi = self.characteristic_function(u, tau)
        return np.real(np.exp(-1j * u * log_K) * phi / (1j * u))

    def _probabilities(self, K: float, T: float) -> Tuple[float, float]:
        log_K = np.log(K)
        integral_P1, _ = quad(lambda u: self._integrand_P1(u, log_K, T), 0, self.u_max, limit=self.quad_limit)
        integral_P2, _ = quad(lambda u: self._integrand_P2(u, log_K, T), 0, self.u_max, limit=self.quad_limit)
        return 0.5 + integral_P1 / np.pi, 0.5 + integral_P2 / np.pi

    def call_price(self, K: Optional[float] = None, T: Optional[float] = None) -> float:
        """European call; strike and maturity default to the contract's."""
        K = self.p.K if K is None else K
        T = self.p.T if T is None else T
        P1, P2 = self._probabilities(K, T)
        call = self.p.S0 * P1 - K * np.exp(-self.p.r * T) * P2
        return max(float(call), 0.0)

    def put_price(self, K: Optional[float] = None, T: Optional[float] = None) -> float:
        K = self.p.K if K is None else K
        T = self.p.T if T is None else T
        call = self.call_price(K, T)
        put = call - self.p.S0 + K * np.exp(-self.p.r * T)
        return max(float(put), 0.0)

    def prices(self) -> Tuple[float, float]:
        """(call, put) for the configured contract."""
        return self.call_price(), self.put_price()
