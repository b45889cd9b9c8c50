"""
Simulation Service: body states at arbitrary instants.

Wraps a Simulator (physics/simulator.py) built once at startup and
shared by every request. Each request reads the shared initial state,
runs its own integration on a miss, and makes its own save attempt.

Endpoints:
    GET  /api/simulation/bodies    - initial conditions at the reference epoch
    POST /api/simulation/simulate  - {"date": ISO-8601} -> list of bodies
    POST /api/simulation/range     - {"from", "to", "step_seconds"} -> states

No unicode (Windows charmap).
"""

import logging

from flask import jsonify, request

from physics.body import format_timestamp, parse_timestamp
from physics.services import CelestiaService
from physics.simulator import range_instants

log = logging.getLogger(__name__)

NOT_READY = {"error": "No initial conditions loaded; simulation unavailable"}


class SimulationService(CelestiaService):
    """
    Compute-or-fetch body states for single instants and instant ranges.
    """

    id = "simulation"
    name = "N-Body Simulation"
    description = "Positions and velocities of Solar System bodies at any instant"
    def __init__(self, simulator):
        self.simulator = simulator

    @property
    def status(self):
        return "live" if self.simulator.ready else "unavailable"

    def validate(self, config):
        """
        Normalize a simulate or range payload.

        Returns {"mode": "instant", "date": datetime} or
        {"mode": "range", "from": datetime, "to": datetime, "step_seconds": float}.
        """
        if not config or not isinstance(config, dict):
            raise ValueError("Request body must be JSON")

        if "from" in config or "to" in config:
            start = parse_timestamp(config.get("from"))
            stop = parse_timestamp(config.get("to"))
            step = config.get("step_seconds")
            if isinstance(step, bool) or not isinstance(step, (int, float)):
                raise ValueError("step_seconds must be a number")
            # raises on bad bounds before any work is done
            range_instants(start, stop, step)
            return {"mode": "range", "from": start, "to": stop, "step_seconds": float(step)}

        if "date" not in config:
            raise ValueError("date is required")
        return {"mode": "instant", "date": parse_timestamp(config["date"])}

    def compute(self, config):
        if config["mode"] == "range":
            states = self.simulator.get_range(config["from"], config["to"], config["step_seconds"])
            return {
                "states": [
                    {"timestamp": format_timestamp(t), "bodies": [b.to_dict() for b in bodies]}
                    for t, bodies in states
                ]
            }
        bodies = self.simulator.get_or_compute(config["date"])
        return [b.to_dict() for b in bodies]

    def _run(self, payload, mode):
        if not self.simulator.ready:
            return jsonify(NOT_READY), 503
        try:
            config = self.validate(payload)
        except ValueError as e:
            log.info("Rejected %s request: %s", mode, e)
            return jsonify({"error": str(e)}), 400
        if config["mode"] != mode:
            return jsonify({"error": "Request body does not match this endpoint"}), 400
        return jsonify(self.compute(config))

    def register_routes(self, bp):
        """Mount simulation endpoints."""

        @bp.route("/simulation/bodies", methods=["GET"])
        def simulation_bodies():
            if not self.simulator.ready:
                return jsonify(NOT_READY), 503
            return jsonify([b.to_dict() for b in self.simulator.initial_state()])

        @bp.route("/simulation/simulate", methods=["POST"])
        def simulation_simulate():
            return self._run(request.get_json(silent=True), "instant")

        @bp.route("/simulation/range", methods=["POST"])
        def simulation_range():
            return self._run(request.get_json(silent=True), "range")
