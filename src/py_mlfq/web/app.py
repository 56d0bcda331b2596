"""Flask application factory for the simulator's JSON API.

The ``create_app`` function returns a Flask app with two endpoints:

- ``GET /api/config`` — the default scheduler configuration.
- ``POST /api/simulate`` — run a simulation and return trace and metrics.
"""

from __future__ import annotations

from typing import Any

from flask import Flask, Response, jsonify, request

from py_mlfq.config import MLFQConfig
from py_mlfq.simulator import Simulator
from py_mlfq.workload import JobSpec, jobs_from_list, parse_jobs

_HTTP_BAD_REQUEST = 400


def _jobs_from_payload(payload: Any, config: MLFQConfig) -> list[JobSpec]:
    """Accept either a job string or a list of job objects."""
    if isinstance(payload, str):
        return parse_jobs(payload, io_length=config.io_length)
    return jobs_from_list(payload)


def create_app(*, defaults: MLFQConfig | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        defaults: Config used when a request does not supply one.

    Returns:
        A configured Flask application ready to serve.

    """
    default_config = defaults if defaults is not None else MLFQConfig()

    app = Flask(__name__)

    @app.route("/api/config")
    def config() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the default scheduler configuration."""
        return jsonify(default_config.to_dict())

    @app.route("/api/simulate", methods=["POST"])
    def simulate() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Run a simulation and return its trace and metrics.

        Expects JSON body: ``{"jobs": ..., "config": {...}}`` where
        ``jobs`` is a job string or a list of job objects and
        ``config`` is optional (missing keys take the built-in defaults).

        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or "jobs" not in data:
            return jsonify({"error": "Missing 'jobs' field"}), _HTTP_BAD_REQUEST

        try:
            overrides = data.get("config")
            if overrides is None:
                sim_config = default_config
            elif isinstance(overrides, dict):
                sim_config = MLFQConfig.from_dict(overrides)
            else:
                msg = "'config' must be an object"
                raise ValueError(msg)
            jobs = _jobs_from_payload(data["jobs"], sim_config)
        except (TypeError, ValueError) as e:
            return jsonify({"error": str(e)}), _HTTP_BAD_REQUEST

        result = Simulator(jobs, sim_config).run()
        return jsonify(result.to_dict())

    return app


def main() -> None:
    """Run the web API development server.

    This is the ``py-mlfq-web`` console entry point.
    """
    app = create_app()
    app.run(debug=True, port=8080)
