"""
Body: one point mass tracked by the simulation.

A simulation state is an ordered list of Body records sharing one
timestamp (or none, for epoch input data). Index order is preserved
across an integration run because forces are accumulated pairwise by
index.

IMPORTANT: No unicode characters allowed (Windows charmap constraint).
"""

from datetime import datetime, timezone

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
TIMESTAMP_FORMAT_FRACTION = "%Y-%m-%dT%H:%M:%S.%fZ"


def parse_timestamp(value):
    """
    Parse an ISO-8601 timestamp into an aware UTC datetime.

    Accepts a trailing 'Z', an explicit offset (converted to UTC), or a
    naive value (interpreted as UTC).

    Raises
    ------
    ValueError
        If the value is not a string or not a valid ISO-8601 timestamp.
    """
    if isinstance(value, datetime):
        instant = value
    else:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("timestamp must be a non-empty ISO-8601 string")
        text = value.strip()
        if text.endswith("Z") or text.endswith("z"):
            text = text[:-1] + "+00:00"
        try:
            instant = datetime.fromisoformat(text)
        except ValueError:
            raise ValueError("invalid ISO-8601 timestamp: {}".format(value))
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def format_timestamp(instant):
    """
    Format an instant as a UTC 'YYYY-MM-DDTHH:MM:SSZ' string.

    Microseconds are kept ('.ffffffZ') when the instant has any, so a
    stored state carries exactly the instant it was computed for.
    """
    instant = parse_timestamp(instant)
    if instant.microsecond:
        return instant.strftime(TIMESTAMP_FORMAT_FRACTION)
    return instant.strftime(TIMESTAMP_FORMAT)


class Body:
    """
    A celestial body at one instant.

    Parameters
    ----------
    name : str
        Unique identifier within a state.
    mass : float
        Mass in kilograms (> 0, validated by data/bodies.py).
    radius : float
        Radius in meters. Informational only.
    position : sequence of 3 floats
        Position in meters, inertial frame shared by all bodies.
    velocity : sequence of 3 floats
        Velocity in m/s, same frame.
    timestamp : datetime, optional
        Instant of this snapshot. None for epoch input data.
    """

    __slots__ = ("name", "mass", "radius", "position", "velocity", "timestamp")

    def __init__(self, name, mass, radius, position, velocity, timestamp=None):
        self.name = name
        self.mass = float(mass)
        self.radius = float(radius)
        self.position = [float(x) for x in position]
        self.velocity = [float(v) for v in velocity]
        self.timestamp = parse_timestamp(timestamp) if timestamp is not None else None

    def copy(self, **changes):
        """Return an independent copy, optionally overriding fields."""
        fields = {
            "name": self.name,
            "mass": self.mass,
            "radius": self.radius,
            "position": list(self.position),
            "velocity": list(self.velocity),
            "timestamp": self.timestamp,
        }
        fields.update(changes)
        return Body(**fields)

    def to_dict(self):
        """Serialize to the JSON shape shared by the API and the stores."""
        return {
            "name": self.name,
            "mass": self.mass,
            "radius": self.radius,
            "position": list(self.position),
            "velocity": list(self.velocity),
            "timestamp": format_timestamp(self.timestamp) if self.timestamp else None,
        }

    @classmethod
    def from_dict(cls, data):
        """
        Build a Body from its dict form.

        Raises
        ------
        ValueError
            If a required key is missing or a value has the wrong shape.
        """
        if not isinstance(data, dict):
            raise ValueError("body record must be an object")
        try:
            position = data["position"]
            velocity = data["velocity"]
            if len(position) != 3 or len(velocity) != 3:
                raise ValueError(
                    "body '{}': position and velocity must have 3 components".format(
                        data.get("name")))
            return cls(
                name=str(data["name"]),
                mass=data["mass"],
                radius=data.get("radius", 0.0),
                position=position,
                velocity=velocity,
                timestamp=data.get("timestamp"),
            )
        except KeyError as e:
            raise ValueError("body record missing field {}".format(e))
        except TypeError as e:
            raise ValueError("malformed body record: {}".format(e))

    def __eq__(self, other):
        if not isinstance(other, Body):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return "Body(name={!r}, mass={!r}, position={!r}, velocity={!r}, timestamp={!r})".format(
            self.name, self.mass, self.position, self.velocity,
            format_timestamp(self.timestamp) if self.timestamp else None)
