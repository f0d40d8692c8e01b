"""
Energy sampling from a tabulated spectrum.

The table (energy, weight) is turned into a variable-width histogram: bin i
starts at energy[i], and the last bin is closed by repeating the spacing of
the final two entries. Draws pick a bin with probability proportional to its
weight and place the value uniformly inside it.
"""

import numpy as np
import numba
from pathlib import Path
from typing import Optional, Tuple, Union

from betagun.core.errors import EmptyDistributionError, InvalidSpectrumError, SpectrumFileError


RngLike = Union[np.random.Generator, int, None]


def make_rng(rng: RngLike = None) -> np.random.Generator:
    """Return ``rng`` if it is a Generator, else a new one seeded with it."""
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def read_spectrum_table(path: Union[str, Path]) -> Tuple[np.ndarray, np.ndarray]:
    """
    Read an (energy, weight) table from a text file.

    File format:
        # comment
        <energy> <weight> [ignored columns...]

    Parameters:
        path: Spectrum file

    Returns:
        energies [MeV], weights (arbitrary units)
    """
    path = Path(path)
    try:
        with open(path, 'r') as f:
            lines = f.readlines()
    except OSError as e:
        raise SpectrumFileError(f"Cannot read spectrum file {path}: {e}") from e

    energies = []
    weights = []
    for lineno, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith('#'):
            continue

        fields = stripped.split()
        if len(fields) < 2:
            raise InvalidSpectrumError(
                f"{path.name}:{lineno}: expected '<energy> <weight>', got {stripped!r}")
        try:
            energies.append(float(fields[0]))
            weights.append(float(fields[1]))
        except ValueError as e:
            raise InvalidSpectrumError(f"{path.name}:{lineno}: {e}") from e

    return np.array(energies, dtype=np.float64), np.array(weights, dtype=np.float64)


def build_bin_edges(energies: np.ndarray) -> np.ndarray:
    """Bin edges from lower edges, extrapolating the last upper edge."""
    energies = np.asarray(energies, dtype=np.float64)
    if len(energies) < 2:
        raise InvalidSpectrumError(
            f"At least 2 spectrum entries are needed, got {len(energies)}")
    last = energies[-1] + (energies[-1] - energies[-2])
    return np.append(energies, last)


@numba.njit(fastmath=True, cache=True)
def _sample_from_cdf(edges: np.ndarray, cdf: np.ndarray, u: float) -> float:
    """
    Binary search for the bin holding u, then interpolate inside it.

    cdf[0] = 0 and cdf[-1] = total weight; u must lie in [0, total).
    Bins with zero weight have cdf[i] == cdf[i+1] and are never selected.
    """
    lo = 0
    hi = len(cdf) - 1
    while hi - lo > 1:
        mid = (lo + hi) // 2
        if cdf[mid] <= u:
            lo = mid
        else:
            hi = mid

    fraction = (u - cdf[lo]) / (cdf[lo + 1] - cdf[lo])
    return edges[lo] + fraction * (edges[lo + 1] - edges[lo])


class SpectrumSampler:
    """
    Weighted random sampling from a tabulated energy spectrum.

    Usage:
        sampler = SpectrumSampler.from_file('K47_beta.dat', rng=42)
        energy = sampler.sample()
        energies = sampler.sample_n(10000)

    The random generator is not locked: share it between threads only if
    the caller serialises access.
    """

    def __init__(self, energies, weights, rng: RngLike = None):
        """
        Parameters:
            energies: Lower bin edges [MeV], strictly increasing, N >= 2
            weights: Bin contents, non-negative, same length as energies
            rng: numpy Generator, integer seed, or None
        """
        energies = np.asarray(energies, dtype=np.float64).ravel()
        weights = np.asarray(weights, dtype=np.float64).ravel()

        if len(energies) != len(weights):
            raise InvalidSpectrumError(
                f"Got {len(energies)} energies but {len(weights)} weights")
        if len(energies) < 2:
            raise InvalidSpectrumError(
                f"At least 2 spectrum entries are needed, got {len(energies)}")
        if not (np.all(np.isfinite(energies)) and np.all(np.isfinite(weights))):
            raise InvalidSpectrumError("Spectrum contains non-finite values")
        if np.any(weights < 0.0):
            bad = int(np.argmax(weights < 0.0))
            raise InvalidSpectrumError(
                f"Negative weight {weights[bad]} at energy {energies[bad]}")
        if np.any(np.diff(energies) <= 0.0):
            bad = int(np.argmax(np.diff(energies) <= 0.0))
            raise InvalidSpectrumError(
                f"Energies must be strictly increasing: "
                f"{energies[bad]} followed by {energies[bad + 1]}")

        self._edges = build_bin_edges(energies)
        self._contents = weights.copy()
        self._cdf = np.concatenate(([0.0], np.cumsum(weights)))
        if not np.isfinite(self._cdf[-1]):
            raise InvalidSpectrumError("Total spectrum weight overflows float64")
        for arr in (self._edges, self._contents, self._cdf):
            arr.setflags(write=False)

        self.rng = make_rng(rng)

    @classmethod
    def from_file(cls, path: Union[str, Path], rng: RngLike = None,
                  verbose: bool = False) -> 'SpectrumSampler':
        """Read a spectrum file and build a sampler from it."""
        energies, weights = read_spectrum_table(path)
        sampler = cls(energies, weights, rng=rng)
        if verbose:
            lo, hi = sampler.energy_range
            print(f"Loaded spectrum: {sampler.n_bins} bins, "
                  f"{lo:.4g}-{hi:.4g} MeV from {Path(path).name}")
        return sampler

    @property
    def n_bins(self) -> int:
        return len(self._contents)

    @property
    def edges(self) -> np.ndarray:
        """Bin edges [MeV], length n_bins + 1."""
        return self._edges

    @property
    def contents(self) -> np.ndarray:
        return self._contents

    @property
    def total_weight(self) -> float:
        return float(self._cdf[-1])

    @property
    def energy_range(self) -> Tuple[float, float]:
        return float(self._edges[0]), float(self._edges[-1])

    def pdf(self) -> np.ndarray:
        """Probability of each bin."""
        self._check_not_empty()
        return self._contents / self.total_weight

    def _check_not_empty(self):
        if not self.total_weight > 0.0:
            raise EmptyDistributionError(
                "Spectrum has zero total weight; nothing to sample from")

    def _uniform_in_total(self, size: Optional[int] = None):
        total = self._cdf[-1]
        u = self.rng.random(size) * total
        # Rounding can push u up to total; keep it inside the last bin
        return np.minimum(u, np.nextafter(total, 0.0))

    def sample(self) -> float:
        """
        Draw one energy [MeV].

        Returns:
            Value in [edges[0], edges[-1]]
        """
        self._check_not_empty()
        u = float(self._uniform_in_total())
        return float(_sample_from_cdf(self._edges, self._cdf, u))

    def sample_n(self, n: int) -> np.ndarray:
        """Draw n energies [MeV] at once."""
        if n < 0:
            raise ValueError(f"n must be >= 0, got {n}")
        self._check_not_empty()

        u = self._uniform_in_total(int(n))
        idx = np.searchsorted(self._cdf, u, side='right') - 1
        idx = np.clip(idx, 0, self.n_bins - 1)

        lo_cdf = self._cdf[idx]
        fraction = (u - lo_cdf) / (self._cdf[idx + 1] - lo_cdf)
        lower = self._edges[idx]
        return lower + fraction * (self._edges[idx + 1] - lower)

    def __repr__(self) -> str:
        lo, hi = self.energy_range
        return (f"SpectrumSampler(n_bins={self.n_bins}, range=[{lo:.4g}, {hi:.4g}] MeV, "
                f"total={self.total_weight:.4g})")
