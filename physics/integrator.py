"""
N-body integrator: state at the reference epoch -> state at a target instant.

Semi-implicit Euler on Newtonian point-mass gravity. Each step runs in
two phases separated by a barrier:

  1. accelerations of every body, computed from a read-only snapshot
     of the step's positions (data-parallel over bodies)
  2. velocity then position update of every body (data-parallel over
     bodies), started only after phase 1 has finished for all bodies

Both phases are split into contiguous index chunks and submitted to an
optional concurrent.futures executor. Chunks never share output
buffers, so the result does not depend on chunk scheduling order.

Step sizing:
    steps = ceil(|delta| / NOMINAL_DT)
    if steps > MAX_STEPS: dt = |delta| / MAX_STEPS, steps = MAX_STEPS

No I/O and no persistence awareness. The integrator is a total function
over well-formed input.

IMPORTANT: No unicode characters allowed (Windows charmap constraint).
"""

import logging
import math
import time

import numpy as np

from physics import constants
from physics.body import parse_timestamp

log = logging.getLogger(__name__)


class IntegratorConfig:
    """
    Numerical parameters of an integration run.

    Parameters
    ----------
    g : float
        Gravitational constant in m^3 kg^-1 s^-2.
    reference_epoch : datetime
        Instant of the initial conditions.
    nominal_dt : float
        Step length in seconds used while the step ceiling is not hit.
    max_steps : int
        Hard ceiling on the number of steps per run.
    min_distance : float
        Pairs closer than this (meters) contribute no force.
    workers : int
        Number of index chunks per phase. 1 runs inline.
    """

    def __init__(self, g=constants.G, reference_epoch=constants.REFERENCE_EPOCH,
                 nominal_dt=constants.NOMINAL_DT, max_steps=constants.MAX_STEPS,
                 min_distance=constants.MIN_DISTANCE, workers=1):
        if nominal_dt <= 0:
            raise ValueError("nominal_dt must be positive")
        if max_steps < 1:
            raise ValueError("max_steps must be at least 1")
        self.g = float(g)
        self.reference_epoch = parse_timestamp(reference_epoch)
        self.nominal_dt = float(nominal_dt)
        self.max_steps = int(max_steps)
        self.min_distance = float(min_distance)
        self.workers = max(1, int(workers))

    def to_dict(self):
        return {
            "G": self.g,
            "reference_epoch": self.reference_epoch.strftime("%Y-%m-%dT%H:%M:%SZ"),
            "nominal_dt": self.nominal_dt,
            "max_steps": self.max_steps,
            "min_distance": self.min_distance,
        }


def plan_steps(delta_seconds, config=None):
    """
    Return (steps, dt, sign) for a signed time offset from the epoch.

    dt is always positive; sign carries the direction of integration.
    """
    config = config or IntegratorConfig()
    span = abs(float(delta_seconds))
    sign = 1.0 if delta_seconds >= 0 else -1.0
    dt = config.nominal_dt
    steps = int(math.ceil(span / dt))
    if steps > config.max_steps:
        dt = span / config.max_steps
        steps = config.max_steps
    return steps, dt, sign


def compute_accelerations(positions, masses, indices, g, min_distance):
    """
    Net gravitational acceleration on each body in `indices`.

    Parameters
    ----------
    positions : ndarray, shape (n, 3)
        Snapshot of all positions. Read only.
    masses : ndarray, shape (n,)
    indices : ndarray of int
        Bodies to compute for.
    g : float
    min_distance : float
        Pairs with separation below this are skipped.

    Returns
    -------
    ndarray, shape (len(indices), 3)
    """
    out = np.zeros((len(indices), 3))
    for row, i in enumerate(indices):
        diff = positions - positions[i]
        dist = np.sqrt(np.einsum("ij,ij->i", diff, diff))
        mask = dist >= min_distance
        mask[i] = False
        if not mask.any():
            continue
        r = dist[mask]
        # a_i = sum_j G m_j (p_j - p_i) / |p_j - p_i|^3
        coeff = g * masses[mask] / (r * r * r)
        out[row] = (coeff[:, None] * diff[mask]).sum(axis=0)
    return out


def apply_update(positions, velocities, accelerations, indices, dt, sign):
    """
    Semi-implicit Euler update for the bodies in `indices`.

    Velocity is updated first; the new velocity then advances the position.

    Returns
    -------
    (ndarray, ndarray)
        New positions and velocities for `indices`, shape (len(indices), 3).
    """
    new_vel = velocities[indices] + sign * accelerations[indices] * dt
    new_pos = positions[indices] + sign * new_vel * dt
    return new_pos, new_vel


def _chunks(n, workers):
    return [c for c in np.array_split(np.arange(n), min(workers, n)) if len(c)]


class Integrator:
    """
    Runs integration steps, optionally on a shared executor.

    The executor is owned by the caller (built once at startup and
    shared across requests). Without one, or with a single chunk, every
    phase runs inline on the calling thread.
    """

    def __init__(self, config=None, executor=None):
        self.config = config or IntegratorConfig()
        self.executor = executor

    def _map(self, fn, chunks, arrays, params):
        """Run fn(*arrays, chunk, *params) for every chunk, in chunk order."""
        if self.executor is None or len(chunks) == 1:
            return [fn(*arrays, c, *params) for c in chunks]
        futures = [self.executor.submit(fn, *arrays, c, *params) for c in chunks]
        # barrier: every chunk of this phase completes before the next phase
        return [f.result() for f in futures]

    def step(self, positions, velocities, masses, dt, sign, chunks=None):
        """
        Advance one step. Inputs are not modified.

        Returns
        -------
        (ndarray, ndarray)
            Positions and velocities after the step.
        """
        if chunks is None:
            chunks = _chunks(len(masses), self.config.workers)
        cfg = self.config
        acc_parts = self._map(compute_accelerations, chunks,
                              (positions, masses), (cfg.g, cfg.min_distance))
        accelerations = np.concatenate(acc_parts)
        # chunks are contiguous and ordered, so concatenation restores index order
        parts = self._map(apply_update, chunks,
                          (positions, velocities, accelerations), (dt, sign))
        new_pos = np.concatenate([p for p, _ in parts])
        new_vel = np.concatenate([v for _, v in parts])
        return new_pos, new_vel

    def integrate(self, bodies, target_instant):
        """
        Integrate `bodies` from the reference epoch to `target_instant`.

        Parameters
        ----------
        bodies : list of Body
            State at the reference epoch. Not modified.
        target_instant : datetime or str

        Returns
        -------
        list of Body
            New bodies, same order, timestamped with `target_instant`.
        """
        target = parse_timestamp(target_instant)
        if not bodies:
            return list(bodies)

        delta = (target - self.config.reference_epoch).total_seconds()
        steps, dt, sign = plan_steps(delta, self.config)

        masses = np.array([b.mass for b in bodies], dtype=float)
        positions = np.array([b.position for b in bodies], dtype=float)
        velocities = np.array([b.velocity for b in bodies], dtype=float)
        chunks = _chunks(len(bodies), self.config.workers)

        start = time.perf_counter()
        for _ in range(steps):
            positions, velocities = self.step(positions, velocities, masses, dt, sign, chunks)
        elapsed = time.perf_counter() - start

        log.info("Integration done: bodies=%d steps=%d dt=%.1fs direction=%+d elapsed=%.3fs",
                 len(bodies), steps, dt, int(sign), elapsed)

        return [
            b.copy(position=positions[k].tolist(), velocity=velocities[k].tolist(),
                   timestamp=target)
            for k, b in enumerate(bodies)
        ]


def integrate(bodies, target_instant, config=None, executor=None):
    """Integrate `bodies` to `target_instant`. See Integrator.integrate."""
    return Integrator(config, executor).integrate(bodies, target_instant)
