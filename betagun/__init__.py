"""
BETAGUN: Primary-particle source for beta-spectrum simulations

Generates the initial position, direction and energy of one primary per
event for an external transport engine.

Modules:
    core: Particle types, ion lookup, primary storage, errors
    sampling: Tabulated-spectrum and solid-angle samplers
    source: Per-event primary generator
    config: YAML configuration
    validation: Statistical checks of generated samples
"""

__version__ = "0.1.0"

from betagun.core.particle import ParticleTable, ParticleType, PrimaryBank, KinematicRecord
from betagun.sampling.spectrum import SpectrumSampler
from betagun.sampling.direction import DirectionSampler
from betagun.source.generator import PrimaryGenerator

__all__ = [
    "ParticleTable",
    "ParticleType",
    "PrimaryBank",
    "KinematicRecord",
    "SpectrumSampler",
    "DirectionSampler",
    "PrimaryGenerator",
]
