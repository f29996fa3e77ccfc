#!/usr/bin/env python3
"""
═══════════════════════════════════════════════════════════════════════════════
HESTON MC - Application Entry Point
═══════════════════════════════════════════════════════════════════════════════

Prices a European vanilla or barrier option under the Heston model by
Monte Carlo and prints the call and put estimates.

Usage:
    python -m heston_mc.run --kernel europeanVanilla
    python -m heston_mc.run --kernel europeanBarrier --upper-barrier 120
    python -m heston_mc.run --kernel europeanVanilla --num-paths 100000 --reference
    python -m heston_mc.run --test          # Run validation suite
    python -m heston_mc.run --serve         # Start the Flask API

Exit status: 0 on success, 2 on invalid configuration. A verification
mismatch is reported but does not change the exit status.

═══════════════════════════════════════════════════════════════════════════════
"""

import sys
import argparse
import logging

from heston_mc.backend.core.config import (
    KERNELS,
    VANILLA_KERNEL,
    DEFAULT_NUM_PATHS,
    DEFAULT_NUM_STEPS,
    DEFAULT_NUM_RNGS,
    DEFAULT_NUM_SIMS,
    DEFAULT_SEED,
    DEFAULT_TOLERANCE,
    EngineConfig,
)
from heston_mc.backend.core.errors import ConfigurationError
from heston_mc.backend.core.logging_config import LOG_LEVELS, setup_logging
from heston_mc.backend.core.parameters import BARRIER_TYPES, KNOCK_OUT, SimulationParameters

logger = logging.getLogger(__name__)


def build_params(args: argparse.Namespace) -> SimulationParameters:
    return SimulationParameters(
        S0=args.spot,
        V0=args.v0,
        r=args.rate,
        kappa=args.kappa,
        theta=args.theta,
        xi=args.xi,
        rho=args.rho,
        K=args.strike,
        T=args.maturity,
        upper_barrier=args.upper_barrier,
        lower_barrier=args.lower_barrier,
        barrier_type=args.barrier_type,
    )


def build_config(args: argparse.Namespace) -> EngineConfig:
    return EngineConfig.from_dict({
        'kernel': args.kernel,
        'num_paths': args.num_paths,
        'expected_call': args.expected_call,
        'expected_put': args.expected_put,
        'num_steps': args.num_steps,
        'num_rngs': args.num_rngs,
        'num_sims': args.num_sims,
        'seed': args.seed,
        'num_workers': args.workers,
        'tolerance': args.tolerance,
    })


def run_pricing(args: argparse.Namespace) -> int:
    """Price the configured option and print the report."""
    from heston_mc.backend.solvers.monte_carlo import MonteCarloSimulator

    try:
        params = build_params(args)
        config = build_config(args)
        simulator = MonteCarloSimulator(params, config)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    report = simulator.run()
    result = report.result

    print("=" * 70)
    print(f"HESTON MC - {config.kernel}")
    print("=" * 70)
    print(f"  Paths:  {result.num_paths:,} ({report.num_simgroups} groups of "
          f"{config.num_rngs} x {config.num_sims})")
    print(f"  Steps:  {config.num_steps}")
    print(f"  Time:   {report.elapsed_seconds:.2f}s")
    print()
    print(f"  Call Price: {result.call_price:.6f} ± {result.call_stderr:.6f}")
    print(f"  Put Price:  {result.put_price:.6f} ± {result.put_stderr:.6f}")

    if args.reference:
        if config.kernel != VANILLA_KERNEL:
            print("\n  Reference prices are only available for europeanVanilla")
        else:
            from heston_mc.backend.solvers.analytical import AnalyticalPricer
            ref_call, ref_put = AnalyticalPricer(params).prices()
            print()
            print(f"  Reference Call: {ref_call:.6f}")
            print(f"  Reference Put:  {ref_put:.6f}")

    if report.verification is not None:
        print()
        failed = {m.quantity: m for m in report.verification.mismatches}
        for name in report.verification.checked:
            status = "FAIL" if name in failed else "PASS"
            expected = config.expected_call if name == 'call' else config.expected_put
            print(f"  {status}: {name} expected {expected:.6f} "
                  f"(tolerance {report.verification.tolerance})")

    print("=" * 70)
    return 0


def run_tests():
    """Run validation tests."""
    from heston_mc.tests.validation import run_all_tests
    success = run_all_tests()
    return 0 if success else 1


def run_server(host='127.0.0.1', port=5000, debug=False):
    """Start the web server."""
    from heston_mc.backend.app import app
    app.run(host=host, port=port, debug=debug)


def make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Heston Monte Carlo Engine (European vanilla and barrier options)',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m heston_mc.run --kernel europeanVanilla --num-paths 100000 --reference
    python -m heston_mc.run --kernel europeanBarrier --upper-barrier 120 --lower-barrier 80
    python -m heston_mc.run --kernel europeanVanilla --expected-call 10.39 --expected-put 5.51
    python -m heston_mc.run --test
    python -m heston_mc.run --serve --port 8000
        """
    )

    parser.add_argument('--kernel', choices=KERNELS, help='Payoff kernel (required for pricing)')

    sim = parser.add_argument_group('simulation')
    sim.add_argument('--num-paths', type=int, default=DEFAULT_NUM_PATHS, help=f'Total paths N (default: {DEFAULT_NUM_PATHS})')
    sim.add_argument('--num-steps', type=int, default=DEFAULT_NUM_STEPS, help=f'Time steps M (default: {DEFAULT_NUM_STEPS})')
    sim.add_argument('--num-rngs', type=int, default=DEFAULT_NUM_RNGS, help=f'Generators R (default: {DEFAULT_NUM_RNGS})')
    sim.add_argument('--num-sims', type=int, default=DEFAULT_NUM_SIMS, help=f'Paths per generator per group (default: {DEFAULT_NUM_SIMS})')
    sim.add_argument('--seed', type=int, default=DEFAULT_SEED, help=f'Root seed (default: {DEFAULT_SEED})')
    sim.add_argument('--workers', type=int, default=None, help='Worker threads (default: one per generator)')

    model = parser.add_argument_group('model and contract')
    model.add_argument('--spot', type=float, default=100.0, help='Initial price S0')
    model.add_argument('--v0', type=float, default=0.04, help='Initial variance V0')
    model.add_argument('--rate', type=float, default=0.05, help='Risk-free rate r')
    model.add_argument('--kappa', type=float, default=2.0, help='Mean reversion speed')
    model.add_argument('--theta', type=float, default=0.04, help='Long-run variance')
    model.add_argument('--xi', type=float, default=0.3, help='Vol-of-vol')
    model.add_argument('--rho', type=float, default=-0.7, help='Price/variance correlation')
    model.add_argument('--strike', type=float, default=100.0, help='Strike K')
    model.add_argument('--maturity', type=float, default=1.0, help='Maturity T in years')
    model.add_argument('--upper-barrier', type=float, default=None, help='Upper barrier level')
    model.add_argument('--lower-barrier', type=float, default=None, help='Lower barrier level')
    model.add_argument('--barrier-type', choices=BARRIER_TYPES, default=KNOCK_OUT, help='Barrier polarity (default: knock_out)')

    verify = parser.add_argument_group('verification')
    verify.add_argument('--expected-call', type=float, default=None, help='Expected call price')
    verify.add_argument('--expected-put', type=float, default=None, help='Expected put price')
    verify.add_argument('--tolerance', type=float, default=DEFAULT_TOLERANCE, help=f'Absolute tolerance (default: {DEFAULT_TOLERANCE})')
    verify.add_argument('--reference', action='store_true', help='Also print the semi-analytical price')

    parser.add_argument('--test', action='store_true', help='Run validation tests')
    parser.add_argument('--serve', action='store_true', help='Start the Flask API')
    parser.add_argument('--host', default='127.0.0.1', help='Server host (default: 127.0.0.1)')
    parser.add_argument('--port', type=int, default=5000, help='Server port (default: 5000)')
    parser.add_argument('--debug', action='store_true', help='Enable Flask debug mode')
    parser.add_argument('--log-level', type=str.upper, choices=LOG_LEVELS, default='WARNING',
                        help='Logging level (default: WARNING)')

    return parser


def main(argv=None):
    parser = make_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_level)

    if args.test:
        return run_tests()
    if args.serve:
        run_server(args.host, args.port, args.debug)
        return 0
    if args.kernel is None:
        parser.error('--kernel is required unless --test or --serve is given')
    return run_pricing(args)


if __name__ == '__main__':
    sys.exit(main())
