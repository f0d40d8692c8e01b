"""Exceptions raised by the primary-particle source."""


class BetagunError(Exception):
    """Base class for all betagun errors."""


class SpectrumFileError(BetagunError, OSError):
    """Spectrum file is missing or cannot be read."""


class InvalidSpectrumError(BetagunError, ValueError):
    """Tabulated spectrum is malformed or has too few entries."""


class EmptyDistributionError(BetagunError, ValueError):
    """Spectrum carries no weight, so there is nothing to sample."""


class InvalidAngleRangeError(BetagunError, ValueError):
    """Angle bounds outside [0, 2pi] or with theta_min >= theta_max."""
