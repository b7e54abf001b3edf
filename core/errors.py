"""Configuration errors raised by the orchestration layer."""


class ConfigurationError(ValueError):
    """Segment layout that cannot be built (e.g. constrained segment without two free neighbors)."""
