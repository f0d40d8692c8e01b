import pytest


@pytest.fixture
def spectrum_file(tmp_path):
    """Three-bin spectrum: edges 1, 2, 3, 4 MeV with weights 5, 3, 2."""
    path = tmp_path / "three_bins.dat"
    path.write_text(
        "# energy weight\n"
        "1.0 5\n"
        "2.0 3\n"
        "3.0 2\n"
    )
    return path


@pytest.fixture
def empty_spectrum_file(tmp_path):
    path = tmp_path / "empty.dat"
    path.write_text("1.0 0\n2.0 0\n")
    return path
