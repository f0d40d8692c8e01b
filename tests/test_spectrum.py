from pathlib import Path

import numpy as np
import numpy.testing as npt
import pytest
from scipy import stats

from betagun.core.errors import EmptyDistributionError, InvalidSpectrumError, SpectrumFileError
from betagun.sampling.spectrum import SpectrumSampler, build_bin_edges, read_spectrum_table
from betagun.validation import chi_square_spectrum

DATA_DIR = Path(__file__).parent.parent / 'data' / 'spectra'

ENERGIES = [1.0, 2.0, 3.0]
WEIGHTS = [5.0, 3.0, 2.0]


def test_bin_edges_extrapolate_last_spacing():
    sampler = SpectrumSampler(ENERGIES, WEIGHTS, rng=1)
    npt.assert_allclose(sampler.edges, [1.0, 2.0, 3.0, 4.0])
    assert sampler.n_bins == 3
    assert sampler.total_weight == pytest.approx(10.0)
    assert sampler.energy_range == (1.0, 4.0)

    npt.assert_allclose(build_bin_edges([0.0, 0.5, 2.0]), [0.0, 0.5, 2.0, 3.5])


def test_bin_fractions():
    sampler = SpectrumSampler(ENERGIES, WEIGHTS, rng=2024)
    samples = sampler.sample_n(200_000)

    counts, _ = np.histogram(samples, bins=sampler.edges)
    npt.assert_allclose(counts / len(samples), [0.5, 0.3, 0.2], atol=0.01)

    _, pvalue = chi_square_spectrum(samples, sampler)
    assert pvalue > 1e-4


def test_scalar_sample_fractions():
    sampler = SpectrumSampler(ENERGIES, WEIGHTS, rng=99)
    samples = np.array([sampler.sample() for _ in range(20_000)])

    counts, _ = np.histogram(samples, bins=sampler.edges)
    npt.assert_allclose(counts / len(samples), [0.5, 0.3, 0.2], atol=0.02)


def test_samples_stay_inside_edges():
    sampler = SpectrumSampler(ENERGIES, WEIGHTS, rng=3)
    samples = sampler.sample_n(50_000)
    assert np.all(samples >= 1.0)
    assert np.all(samples <= 4.0)

    for _ in range(1000):
        assert 1.0 <= sampler.sample() <= 4.0


def test_uniform_within_bin():
    sampler = SpectrumSampler(ENERGIES, WEIGHTS, rng=5)
    samples = sampler.sample_n(100_000)
    first_bin = samples[samples < 2.0]

    result = stats.kstest(first_bin, 'uniform', args=(1.0, 1.0))
    assert result.pvalue > 1e-4


def test_zero_weight_bins_never_sampled():
    sampler = SpectrumSampler([0.0, 1.0, 2.0, 3.0], [0.0, 4.0, 0.0, 1.0], rng=11)
    samples = sampler.sample_n(50_000)
    scalar = np.array([sampler.sample() for _ in range(2000)])

    for s in (samples, scalar):
        assert not np.any(s < 1.0)
        assert not np.any((s >= 2.0) & (s < 3.0))


def test_same_seed_same_sequence():
    a = SpectrumSampler(ENERGIES, WEIGHTS, rng=np.random.default_rng(42))
    b = SpectrumSampler(ENERGIES, WEIGHTS, rng=np.random.default_rng(42))

    npt.assert_array_equal(a.sample_n(1000), b.sample_n(1000))
    assert [a.sample() for _ in range(100)] == [b.sample() for _ in range(100)]


def test_tables_are_read_only():
    weights = np.array(WEIGHTS)
    sampler = SpectrumSampler(ENERGIES, weights, rng=0)
    weights[0] = 100.0
    assert sampler.contents[0] == 5.0
    with pytest.raises(ValueError):
        sampler.edges[0] = 0.0


@pytest.mark.parametrize("energies, weights", [
    ([1.0], [1.0]),
    ([], []),
    ([1.0, 2.0], [1.0, -0.5]),
    ([1.0, 1.0, 2.0], [1.0, 1.0, 1.0]),
    ([2.0, 1.0], [1.0, 1.0]),
    ([1.0, 2.0, 3.0], [1.0, 1.0]),
    ([1.0, np.nan], [1.0, 1.0]),
    ([1.0, 2.0], [1.0, np.inf]),
    ([1.0, 2.0, 3.0], [1e308] * 3),
])
def test_invalid_tables(energies, weights):
    with pytest.raises(InvalidSpectrumError):
        SpectrumSampler(energies, weights)


def test_zero_total_weight_fails_on_sampling():
    sampler = SpectrumSampler([1.0, 2.0], [0.0, 0.0], rng=0)
    with pytest.raises(EmptyDistributionError):
        sampler.sample()
    with pytest.raises(EmptyDistributionError):
        sampler.sample_n(10)


def test_read_table_skips_comments_and_extra_columns(tmp_path):
    path = tmp_path / "spec.dat"
    path.write_text(
        "# header\n"
        "0.1 10 ignored\n"
        "\n"
        "   # indented comment\n"
        "0.2\t20\n"
        "0.3 5.5e1\n"
    )
    energies, weights = read_spectrum_table(path)
    npt.assert_allclose(energies, [0.1, 0.2, 0.3])
    npt.assert_allclose(weights, [10.0, 20.0, 55.0])


def test_read_table_errors(tmp_path):
    with pytest.raises(SpectrumFileError):
        read_spectrum_table(tmp_path / "missing.dat")
    with pytest.raises(OSError):
        SpectrumSampler.from_file(tmp_path / "missing.dat")

    bad = tmp_path / "bad.dat"
    bad.write_text("1.0 2.0\n2.0\n")
    with pytest.raises(InvalidSpectrumError, match=":2:"):
        read_spectrum_table(bad)

    text = tmp_path / "text.dat"
    text.write_text("1.0 abc\n")
    with pytest.raises(InvalidSpectrumError):
        read_spectrum_table(text)


def test_from_file(spectrum_file):
    sampler = SpectrumSampler.from_file(spectrum_file, rng=1)
    npt.assert_allclose(sampler.edges, [1.0, 2.0, 3.0, 4.0])
    npt.assert_allclose(sampler.pdf(), [0.5, 0.3, 0.2])


def test_bundled_beta_spectrum():
    sampler = SpectrumSampler.from_file(DATA_DIR / 'K47_beta.dat', rng=8)
    assert sampler.n_bins == 33
    assert sampler.contents[0] == 0.0

    samples = sampler.sample_n(100_000)
    _, pvalue = chi_square_spectrum(samples, sampler)
    assert pvalue > 1e-4
