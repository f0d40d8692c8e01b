"""
Statistical checks of sampled primaries.

Used by the test-suite and example scripts to compare generated samples
with the distributions they are meant to follow.
"""

import numpy as np
from scipy import stats
from typing import Tuple

from betagun.sampling.spectrum import SpectrumSampler


def chi_square_spectrum(samples: np.ndarray, sampler: SpectrumSampler) -> Tuple[float, float]:
    """
    Chi-square test of sampled energies against the sampler's bin weights.

    Bins with zero weight are left out (their expected count is zero and a
    correct sampler never fills them).

    Returns:
        (statistic, p-value)
    """
    samples = np.asarray(samples, dtype=np.float64)
    observed, _ = np.histogram(samples, bins=sampler.edges)
    expected = sampler.pdf() * len(samples)

    populated = expected > 0
    result = stats.chisquare(observed[populated], expected[populated])
    return float(result.statistic), float(result.pvalue)


def ks_uniform_cos_theta(directions: np.ndarray, cos_min: float = -1.0,
                         cos_max: float = 1.0) -> Tuple[float, float]:
    """
    Kolmogorov-Smirnov test that the z-components are uniform on [cos_min, cos_max].

    For isotropic emission over the full sphere cos(theta) = z is uniform
    on [-1, 1].

    Returns:
        (statistic, p-value)
    """
    z = np.asarray(directions, dtype=np.float64)[:, 2]
    result = stats.kstest(z, 'uniform', args=(cos_min, cos_max - cos_min))
    return float(result.statistic), float(result.pvalue)


def ks_disk_radius(positions: np.ndarray, radius: float,
                   radial_sampling: str = 'area') -> Tuple[float, float]:
    """
    Kolmogorov-Smirnov test of the radial distribution of source positions.

    'area' sampling gives CDF(r) = (r/R)^2, 'linear' gives CDF(r) = r/R.

    Returns:
        (statistic, p-value)
    """
    xy = np.asarray(positions, dtype=np.float64)[:, :2]
    r = np.hypot(xy[:, 0], xy[:, 1]) / radius
    if radial_sampling == 'area':
        cdf = lambda x: np.clip(x, 0.0, 1.0) ** 2
    elif radial_sampling == 'linear':
        cdf = lambda x: np.clip(x, 0.0, 1.0)
    else:
        raise ValueError(f"Unknown radial_sampling '{radial_sampling}'")
    result = stats.kstest(r, cdf)
    return float(result.statistic), float(result.pvalue)
