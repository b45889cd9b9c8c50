"""
Physical and numerical constants for the celestia integrator.

All values are process-wide and never mutated at runtime. They are
collected into an IntegratorConfig (physics/integrator.py) so tests and
services can inject alternatives without touching module state.

IMPORTANT: No unicode characters allowed in this file (Windows charmap constraint).
"""

from datetime import datetime, timezone

# Gravitational constant (CODATA 2018)
G = 6.67430e-11  # m^3 kg^-1 s^-2

# Reference epoch of the initial conditions (J2000.0, treated as UTC)
REFERENCE_EPOCH = datetime(2000, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

# Nominal integration step (1 hour)
NOMINAL_DT = 3600.0  # s

# Hard ceiling on integration steps per run. Longer horizons get a
# coarser dt instead of more steps.
MAX_STEPS = 10000

# Singularity guard: pairs closer than this exert no force on each other
MIN_DISTANCE = 1.0e3  # m

# Astronomical unit (IAU 2012 exact)
AU = 1.495978707e11  # m

# AU/day -> m/s
AU_PER_DAY = AU / 86400.0

# Maximum number of instants resolved by one range query
MAX_RANGE_POINTS = 100
