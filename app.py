"""
CELESTIA - Solar System state service
Flask application factory.

Serves the REST API for body positions and velocities at arbitrary
instants via registered CelestiaService instances. Long-lived
collaborators (initial state, stores, integrator worker pool) are built
once here and shared by every request.

Usage:
    python app.py              # Development server on http://127.0.0.1:8080
    flask run                  # Same, via Flask CLI
"""

__version__ = "0.1.0"

import logging
from concurrent.futures import ThreadPoolExecutor

from flask import Flask

from data.bodies import load_bodies
from log_setup import configure_logging
from physics.integrator import Integrator, IntegratorConfig
from physics.services import CelestiaRegistry
from physics.services.simulation import SimulationService
from physics.simulator import Simulator
from settings import Settings
from storage.file_cache import FileCacheStore
from storage.mongo import MongoStore

log = logging.getLogger(__name__)


def create_stores(settings):
    """
    Build the configured backends.

    Returns
    -------
    (list, list)
        Lookup stores (remote first, then local cache) and save stores.
    """
    stores = []
    if settings.persistence.uses_mongo:
        if settings.mongo_uri:
            stores.append(MongoStore.connect(
                settings.mongo_uri,
                settings.mongo_db,
                settings.mongo_collection,
                timeout_ms=settings.mongo_timeout_ms,
            ))
        else:
            log.warning("Persistence '%s' requested but CELESTIA_MONGO_URI is not set; "
                        "remote store disabled", settings.persistence.value)
    if settings.persistence.uses_cache:
        stores.append(FileCacheStore(settings.cache_dir))
    return stores, list(stores)


def create_simulator(settings, executor=None):
    """Load initial conditions and wire the Simulator."""
    bodies = load_bodies(settings.bodies_path)
    if not bodies:
        log.error("No initial conditions loaded from %s; simulation endpoints disabled",
                  settings.bodies_path)
    config = IntegratorConfig(workers=settings.workers)
    lookup_stores, save_stores = create_stores(settings)
    return Simulator(
        bodies,
        integrator=Integrator(config, executor),
        lookup_stores=lookup_stores,
        save_stores=save_stores,
        key_resolution=settings.cache_resolution,
    )


def create_registry(simulator):
    """Build and populate the service registry."""
    registry = CelestiaRegistry()
    registry.register(SimulationService(simulator))
    return registry


def create_app(settings=None, simulator=None):
    """
    Application factory for the Celestia Flask app.

    Parameters
    ----------
    settings : Settings, optional
        Defaults to Settings.from_env().
    simulator : Simulator, optional
        Pre-built simulator (tests). Built from settings otherwise.
    """
    settings = settings or Settings.from_env()

    app = Flask(__name__)
    app.config["CELESTIA_SETTINGS"] = settings

    if simulator is None:
        executor = None
        if settings.workers > 1:
            executor = ThreadPoolExecutor(max_workers=settings.workers,
                                          thread_name_prefix="celestia-integrator")
            app.extensions["celestia_executor"] = executor
        simulator = create_simulator(settings, executor)
    app.extensions["celestia_simulator"] = simulator

    registry = create_registry(simulator)

    from api.routes import create_api_blueprint
    api = create_api_blueprint(registry, simulator.integrator.config)
    app.register_blueprint(api)

    return app


def main():
    settings = Settings.from_env()
    configure_logging(settings.log_level, settings.log_output)
    app = create_app(settings)
    log.info("Celestia %s listening on http://%s:%d", __version__, settings.host, settings.port)
    app.run(host=settings.host, port=settings.port, threaded=True)


if __name__ == "__main__":
    main()
