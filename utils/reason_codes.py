"""
Standardized reason codes for skipped combinations and failed fits.

A search never drops a combination silently: every skip is counted under
one of these codes.
"""

# Configuration errors
E_SCHEMA = "E_SCHEMA"
E_CONFIG = "E_CONFIG"
E_EMPTY_SPACE = "E_EMPTY_SPACE"

# Combination build/score outcomes
E_ABSENT_MODEL = "E_ABSENT_MODEL"
E_NONFINITE_SCORE = "E_NONFINITE_SCORE"

# Observation data errors
E_DATA = "E_DATA"

# All valid reason codes
REASON_CODES = {
    E_SCHEMA,
    E_CONFIG,
    E_EMPTY_SPACE,
    E_ABSENT_MODEL,
    E_NONFINITE_SCORE,
    E_DATA,
}


def validate_reason_code(code: str) -> bool:
    """
    Check if a reason code is valid.

    Valid codes are either in REASON_CODES or prefixed with E_.
    """
    if code in REASON_CODES:
        return True
    if code.startswith("E_"):
        return True
    return False
