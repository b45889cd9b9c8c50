"""
Simulator: compute-or-fetch orchestration on top of the Integrator.

For a target instant:
  1. derive the cache key (daily resolution by default)
  2. ask each lookup store in order; the first non-empty hit wins
  3. on a miss, integrate the shared initial state to the full instant
  4. save the new state to every save store

Read failures count as misses and write failures are logged; neither
fails the request. The initial state is held as an immutable tuple and
is never mutated, so concurrent requests need no locking. Two
concurrent misses on the same key both compute and both save; the
duplicate work is accepted and the remote store's unique index absorbs
the second insert.

IMPORTANT: No unicode characters allowed (Windows charmap constraint).
"""

import logging
from datetime import timedelta

from physics.body import parse_timestamp
from physics.constants import MAX_RANGE_POINTS
from physics.integrator import Integrator
from storage import StoreError

log = logging.getLogger(__name__)

KEY_FORMATS = {
    # Daily resolution: every instant of a UTC day shares one entry.
    "day": "%Y-%m-%d",
    "second": "%Y-%m-%dT%H-%M-%SZ",
}


def cache_key(instant, resolution="day"):
    """
    Cache key for `instant` at the given resolution.

    Raises
    ------
    ValueError
        If `resolution` is not one of KEY_FORMATS.
    """
    if resolution not in KEY_FORMATS:
        raise ValueError("unknown cache key resolution: {}".format(resolution))
    return parse_timestamp(instant).strftime(KEY_FORMATS[resolution])


def range_instants(start, stop, step_seconds, max_points=MAX_RANGE_POINTS):
    """
    Instants start, start + step, ... up to and including stop.

    Raises
    ------
    ValueError
        If step_seconds <= 0, stop < start, or the range exceeds max_points.
    """
    start = parse_timestamp(start)
    stop = parse_timestamp(stop)
    if step_seconds <= 0:
        raise ValueError("step_seconds must be positive")
    if stop < start:
        raise ValueError("'to' must not be before 'from'")
    count = int((stop - start).total_seconds() // step_seconds) + 1
    if count > max_points:
        raise ValueError("range has {} points, maximum is {}".format(count, max_points))
    try:
        step = timedelta(seconds=step_seconds)
    except OverflowError:
        raise ValueError("step_seconds is out of range: {}".format(step_seconds))
    return [start + k * step for k in range(count)]


class Simulator:
    """
    Orchestrates cached lookups and integrator runs for one initial state.

    Parameters
    ----------
    initial_bodies : list of Body
        State at the reference epoch. Copied; the caller's list is not kept.
    integrator : Integrator, optional
    lookup_stores : list of SimulationStore
        Read in order; first hit wins.
    save_stores : list of SimulationStore
        Every store receives each newly computed state.
    key_resolution : str
        "day" or "second". See cache_key().
    """

    def __init__(self, initial_bodies, integrator=None, lookup_stores=(), save_stores=(),
                 key_resolution="day"):
        if key_resolution not in KEY_FORMATS:
            raise ValueError("unknown cache key resolution: {}".format(key_resolution))
        self._initial = tuple(b.copy() for b in initial_bodies)
        self.integrator = integrator or Integrator()
        self.lookup_stores = list(lookup_stores)
        self.save_stores = list(save_stores)
        self.key_resolution = key_resolution

    @property
    def ready(self):
        """False when no initial conditions were loaded."""
        return len(self._initial) > 0

    def initial_state(self):
        """Fresh copy of the initial state."""
        return [b.copy() for b in self._initial]

    def key_for(self, target_instant):
        return cache_key(target_instant, self.key_resolution)

    def lookup(self, key):
        """Return the first stored state for `key`, or None."""
        for store in self.lookup_stores:
            try:
                bodies = store.find(key)
            except StoreError as e:
                log.warning("Store %s unavailable for key %s, treating as miss: %s",
                            store.name, key, e)
                continue
            if bodies:
                log.info("Cache hit: key=%s store=%s", key, store.name)
                return bodies
        return None

    def persist(self, key, bodies):
        """Save `bodies` to every save store. Failures are logged only."""
        if not bodies:
            return
        for store in self.save_stores:
            try:
                store.save(key, bodies)
            except StoreError as e:
                log.error("Could not save key %s to store %s: %s", key, store.name, e)

    def compute(self, target_instant):
        """Run the integrator on the initial state, without touching the stores."""
        return self.integrator.integrate(list(self._initial), target_instant)

    def get_or_compute(self, target_instant):
        """
        State at `target_instant`, from a store when available.

        Parameters
        ----------
        target_instant : datetime or str

        Returns
        -------
        list of Body
        """
        target = parse_timestamp(target_instant)
        key = self.key_for(target)
        cached = self.lookup(key)
        if cached is not None:
            return cached

        log.info("Cache miss: key=%s, integrating to %s", key, target.isoformat())
        result = self.compute(target)
        self.persist(key, result)
        return result

    def get_range(self, start, stop, step_seconds):
        """
        States for every instant of a [start, stop] range.

        Returns
        -------
        list of (datetime, list of Body)
        """
        return [(t, self.get_or_compute(t)) for t in range_instants(start, stop, step_seconds)]
