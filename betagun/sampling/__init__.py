"""Sampling module: Energy spectrum and direction samplers."""

from betagun.sampling.spectrum import SpectrumSampler, read_spectrum_table
from betagun.sampling.direction import DirectionSampler

__all__ = ["SpectrumSampler", "read_spectrum_table", "DirectionSampler"]
