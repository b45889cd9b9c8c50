"""
Service layer: CelestiaService ABC and CelestiaRegistry.

A service bundles request validation, the computation behind it and
the /api endpoints that expose it. Services are constructed once in
app.create_registry() with their long-lived collaborators (the shared
Simulator) and handed to the API blueprint, which mounts every
registered service's routes.

IMPORTANT: No unicode characters allowed (Windows charmap constraint).
"""

from abc import ABC, abstractmethod


class CelestiaService(ABC):
    """
    Base class for an API-facing computation.

    Subclasses set `id`, `name` and `description`, and report `status`
    ("live" when requests can be served, "unavailable" otherwise).
    """

    id = ""
    name = ""
    description = ""

    @property
    def status(self):
        return "live"

    @abstractmethod
    def validate(self, config):
        """
        Normalize a raw request payload.

        Raises
        ------
        ValueError
            If the payload is rejected; the message is returned to the client.
        """

    @abstractmethod
    def compute(self, config):
        """Run the computation for a payload returned by validate()."""

    def register_routes(self, blueprint):
        """Mount the service's endpoints on the /api blueprint."""

    def metadata(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "status": self.status,
        }


class CelestiaRegistry:
    """Services in registration order, keyed by id."""

    def __init__(self):
        self._services = {}

    def register(self, service):
        """
        Add a service.

        Raises
        ------
        ValueError
            If a service with the same id is already registered.
        """
        if service.id in self._services:
            raise ValueError("Service '{}' is already registered".format(service.id))
        self._services[service.id] = service

    def __iter__(self):
        return iter(self._services.values())

    def list_all(self):
        """Metadata of every registered service."""
        return [s.metadata() for s in self]
