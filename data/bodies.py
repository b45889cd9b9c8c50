"""
Initial conditions: Solar System bodies at the reference epoch.

bodies.json holds heliocentric ecliptic state vectors at J2000.0
(2000-01-01T12:00:00), SI units:
    mass     kg
    radius   m
    position m
    velocity m/s

Values are rounded from published ephemerides (planets to ~4 significant
digits in AU and AU/day); they are initial conditions for an Euler
integrator, not an ephemeris.

load_bodies() is the validation boundary for body records: every mass
must be strictly positive and finite, every vector 3 finite numbers,
names unique. Any problem yields an empty list and an error log line.

IMPORTANT: No unicode characters (Windows charmap constraint).
"""

import json
import logging
import math
import os

from physics.body import Body

log = logging.getLogger(__name__)

DEFAULT_BODIES_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "bodies.json")


def validate_body(body):
    """
    Check physical sanity of a parsed Body.

    Raises
    ------
    ValueError
        On non-finite values, non-positive mass or negative radius.
    """
    numbers = [body.mass, body.radius] + body.position + body.velocity
    if not all(math.isfinite(x) for x in numbers):
        raise ValueError("body '{}' has non-finite values".format(body.name))
    if body.mass <= 0:
        raise ValueError("body '{}' mass must be positive".format(body.name))
    if body.radius < 0:
        raise ValueError("body '{}' radius must not be negative".format(body.name))
    if not body.name:
        raise ValueError("body name must not be empty")
    return body


def parse_bodies(raw):
    """
    Parse and validate a decoded JSON document into a list of Body.

    Raises
    ------
    ValueError
        If the document is not a list or any record is invalid.
    """
    if not isinstance(raw, list):
        raise ValueError("initial conditions must be a JSON array")
    bodies = []
    seen = set()
    for item in raw:
        body = validate_body(Body.from_dict(item))
        if body.name in seen:
            raise ValueError("duplicate body name '{}'".format(body.name))
        seen.add(body.name)
        bodies.append(body)
    return bodies


def load_bodies(path=DEFAULT_BODIES_PATH):
    """Load initial conditions from `path`. On any error return []."""
    if not os.path.isfile(path):
        log.error("Initial conditions file not found: %s", path)
        return []
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        bodies = parse_bodies(raw)
    except (OSError, ValueError) as e:
        log.error("Could not load initial conditions from %s: %s", path, e)
        return []
    log.info("Loaded %d bodies from %s", len(bodies), path)
    return bodies
