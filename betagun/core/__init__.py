"""Core module: Particle types, primary storage, errors."""

from betagun.core.errors import (
    BetagunError,
    SpectrumFileError,
    InvalidSpectrumError,
    EmptyDistributionError,
    InvalidAngleRangeError,
)
from betagun.core.particle import (
    ParticleType,
    ParticleTable,
    KinematicRecord,
    Event,
    PrimaryBank,
    CHARGED_GEANTINO,
)

__all__ = [
    "BetagunError",
    "SpectrumFileError",
    "InvalidSpectrumError",
    "EmptyDistributionError",
    "InvalidAngleRangeError",
    "ParticleType",
    "ParticleTable",
    "KinematicRecord",
    "Event",
    "PrimaryBank",
    "CHARGED_GEANTINO",
]
