"""
Persistence backends for computed simulation states.

Classes:
    SimulationStore   - Abstract base class for a keyed state store
    StoreError        - Raised by backends for any I/O or driver failure
    PersistenceTarget - Which backends a deployment writes to

A store is looked up by key (see physics.simulator.cache_key) and
returns either a list of Body or None. Backends never decide lookup
order or fan-out; the Simulator receives an ordered list of lookup
stores and a list of save stores.

IMPORTANT: No unicode characters allowed (Windows charmap constraint).
"""

from abc import ABC, abstractmethod
from enum import Enum


class StoreError(Exception):
    """A backend could not read or write a state."""


class PersistenceTarget(str, Enum):
    """Backends selected for a deployment."""

    CACHE = "cache"
    MONGO = "mongo"
    ALL = "all"

    @property
    def uses_cache(self):
        return self in (PersistenceTarget.CACHE, PersistenceTarget.ALL)

    @property
    def uses_mongo(self):
        return self in (PersistenceTarget.MONGO, PersistenceTarget.ALL)


class SimulationStore(ABC):
    """
    Abstract keyed store of simulation states.

    Class Attributes
    ----------------
    name : str
        Short backend identifier used in log lines (e.g. "file", "mongo").
    """

    name = ""

    @abstractmethod
    def find(self, key):
        """
        Look up the state stored under `key`.

        Parameters
        ----------
        key : str
            Cache key.

        Returns
        -------
        list of Body or None
            The stored state in its original order, or None when absent.

        Raises
        ------
        StoreError
            If the backend is unreachable or the stored data is unreadable.
        """

    @abstractmethod
    def save(self, key, bodies):
        """
        Store `bodies` under `key`.

        Not guaranteed idempotent: a backend with a uniqueness constraint
        may see duplicate inserts and must tolerate them.

        Raises
        ------
        StoreError
            If the write fails.
        """
