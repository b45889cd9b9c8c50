"""
Flask API routes shared by all Celestia services.

Endpoints:
  GET  /api/ping        - liveness check
  GET  /api/constants   - integrator constants in effect
  GET  /api/services    - registered services and their status

Service-owned endpoints (e.g. /api/simulation/*) are mounted by each
registered service's register_routes().
"""

from flask import Blueprint, jsonify

from physics.constants import MAX_RANGE_POINTS


def create_api_blueprint(registry, integrator_config):
    """
    Build the /api blueprint.

    Parameters
    ----------
    registry : CelestiaRegistry
        Services whose routes are mounted on the blueprint.
    integrator_config : IntegratorConfig
        Reported by /api/constants.
    """
    api = Blueprint("api", __name__, url_prefix="/api")

    @api.route("/ping", methods=["GET"])
    def ping():
        return "pong"

    @api.route("/constants", methods=["GET"])
    def get_constants():
        """Return the constants used by the integrator."""
        result = integrator_config.to_dict()
        result["max_range_points"] = MAX_RANGE_POINTS
        return jsonify(result)

    @api.route("/services", methods=["GET"])
    def list_services():
        return jsonify(registry.list_all())

    for service in registry:
        service.register_routes(api)

    return api
