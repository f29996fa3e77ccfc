"""
Flask Backend API for Heston MC

═══════════════════════════════════════════════════════════════════════════════
REST API ENDPOINTS
═══════════════════════════════════════════════════════════════════════════════

Endpoints:
- GET  /api/health:    Health check
- POST /api/price:     Monte Carlo call/put prices (vanilla or barrier kernel)
- POST /api/reference: Semi-analytical Heston call/put prices

Invalid parameters or configuration → 400, anything else → 500.

═══════════════════════════════════════════════════════════════════════════════
"""

import logging
import math

from flask import Flask, request, jsonify
from flask_cors import CORS

from heston_mc import __version__
from heston_mc.backend.core.config import EngineConfig
from heston_mc.backend.core.errors import ConfigurationError
from heston_mc.backend.core.parameters import SimulationParameters, get_default_params
from heston_mc.backend.solvers.analytical import AnalyticalPricer
from heston_mc.backend.solvers.monte_carlo import MonteCarloSimulator

logger = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app)


# ═══════════════════════════════════════════════════════════════════════════════
# UTILITY FUNCTIONS
# ═══════════════════════════════════════════════════════════════════════════════

def get_json_data() -> dict:
    """Get JSON data from request with fallback to empty dict."""
    json_data = request.get_json(silent=True)
    return json_data if isinstance(json_data, dict) else {}


def parse_params(data: dict) -> SimulationParameters:
    """
    Parse SimulationParameters from request data; missing fields take the
    default contract's values.

    Expected format:
    {
        "params": {
            "S0", "V0", "r", "kappa", "theta", "xi", "rho", "K", "T",
            "upper_barrier", "lower_barrier", "barrier_type"
        }
    }
    """
    merged = get_default_params().to_dict()
    merged.update(data.get('params') or {})
    return SimulationParameters.from_dict(merged)


def parse_config(data: dict) -> EngineConfig:
    """Kernel and expected prices may sit at the top level or under "config"."""
    merged = dict(data.get('config') or {})
    for key in ('kernel', 'expected_call', 'expected_put'):
        if data.get(key) is not None:
            merged[key] = data[key]
    return EngineConfig.from_dict(merged)


def json_float(value: float):
    return float(value) if math.isfinite(value) else None


def error_response(exc: Exception, status: int):
    return jsonify({'error': str(exc)}), status


# ═══════════════════════════════════════════════════════════════════════════════
# ROUTES
# ═══════════════════════════════════════════════════════════════════════════════

@app.route('/api/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return jsonify({
        'status': 'healthy',
        'service': 'Heston MC API',
        'version': __version__
    })


@app.route('/api/price', methods=['POST'])
def price_option():
    """
    Monte Carlo call and put prices.

    Request JSON:
    {
        "kernel": "europeanVanilla" | "europeanBarrier",
        "params": {...},
        "config": {num_paths, num_steps, num_rngs, num_sims, seed, tolerance},
        "expected_call": float (optional),
        "expected_put": float (optional)
    }

    Response JSON:
    {
        "kernel", "call_price", "put_price", "call_stderr", "put_stderr",
        "call_confidence_95", "put_confidence_95", "num_paths", "num_simgroups",
        "verification": {"passed", "tolerance", "checked", "mismatches"} (optional)
    }
    """
    try:
        data = get_json_data()
        params = parse_params(data)
        config = parse_config(data)

        report = MonteCarloSimulator(params, config).run()
        result = report.result
        call_ci, put_ci = result.confidence_interval(0.95)

        response = {
            'kernel': report.kernel,
            'call_price': float(result.call_price),
            'put_price': float(result.put_price),
            'call_stderr': json_float(result.call_stderr),
            'put_stderr': json_float(result.put_stderr),
            'call_confidence_95': [json_float(x) for x in call_ci],
            'put_confidence_95': [json_float(x) for x in put_ci],
            'num_paths': result.num_paths,
            'num_simgroups': report.num_simgroups,
            'elapsed_seconds': report.elapsed_seconds,
        }

        if report.verification is not None:
            response['verification'] = {
                'passed': report.verification.passed,
                'tolerance': report.verification.tolerance,
                'checked': list(report.verification.checked),
                'mismatches': [
                    {
                        'quantity': m.quantity,
                        'expected': m.expected,
                        'computed': m.computed,
                        'error': m.error,
                    }
                    for m in report.verification.mismatches
                ],
            }

        return jsonify(response)

    except (ConfigurationError, TypeError, ValueError) as e:
        return error_response(e, 400)
    except Exception as e:
        logger.exception("pricing request failed")
        return error_response(e, 500)


@app.route('/api/reference', methods=['POST'])
def reference_price():
    """
    Semi-analytical Heston prices for the contract in "params".

    Response JSON: {"call_price": float, "put_price": float}
    """
    try:
        params = parse_params(get_json_data())
        call, put = AnalyticalPricer(params).prices()
        return jsonify({'call_price': call, 'put_price': put})

    except (ConfigurationError, TypeError, ValueError) as e:
        return error_response(e, 400)
    except Exception as e:
        logger.exception("reference request failed")
        return error_response(e, 500)
