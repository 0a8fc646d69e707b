"""
Central configuration for navcore tunables and shared constants.
"""

import logging
import os

TRACE: int = 5
logging.addLevelName(TRACE, "TRACE")

TRACE_ENABLED = str(os.getenv("NAVCORE_TRACE", "0")).lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"Environment variable {name}='{raw}' is not a valid integer") from None


# Tolerance used by epsilon_equals across the profile, GVF and follower code
EPSILON: float = float(os.getenv("NAVCORE_EPSILON", "1e-6"))

# Default separation between constraint samples for dynamic profiles
PROFILE_RESOLUTION: float = float(os.getenv("NAVCORE_PROFILE_RESOLUTION", "0.25"))

# Fixed iteration caps; these bound worst-case latency of a single call
PEAK_VELOCITY_SEARCH_ITERATIONS: int = _env_int("NAVCORE_PEAK_VELOCITY_SEARCH_ITERATIONS", 1000)
DISTANCE_SEARCH_ITERATIONS: int = _env_int("NAVCORE_DISTANCE_SEARCH_ITERATIONS", 50)
PROJECT_ITERATIONS: int = _env_int("NAVCORE_PROJECT_ITERATIONS", 10)

# Spacing between initial guesses for a cold-start path projection
PROJECT_GUESS_SPACING: float = float(os.getenv("NAVCORE_PROJECT_GUESS_SPACING", "3.0"))

# Follower endpoint handling
CORRECTION_DISTANCE: float = float(os.getenv("NAVCORE_CORRECTION_DISTANCE", "5.0"))
CURVATURE_CONTROL_MIN_SPEED: float = float(os.getenv("NAVCORE_CURVATURE_CONTROL_MIN_SPEED", "5.0"))
