import numpy as np
import pytest

from betagun.core.particle import (
    CHARGED_GEANTINO,
    Event,
    ParticleTable,
    ParticleType,
    PrimaryBank,
)


def test_find_particle():
    table = ParticleTable()
    electron = table.find_particle('e-')
    assert electron.charge == -1.0
    assert not electron.placeholder
    assert table.find_particle('alpha').is_ion
    assert table.find_particle('chargedgeantino') is CHARGED_GEANTINO
    with pytest.raises(ValueError):
        table.find_particle('pion')


def test_placeholder_type():
    marker = ParticleType.placeholder_type('marker')
    assert marker.placeholder
    assert not marker.is_ion
    assert marker != ParticleType('marker', charge=1.0)


def test_get_ion():
    table = ParticleTable()
    ion = table.get_ion(19, 47)
    assert ion.name == 'K47'
    assert (ion.Z, ion.A) == (19, 47)
    assert ion.charge == 19.0
    assert ion.is_ion
    assert table.get_ion(19, 47) is ion

    excited = table.get_ion(56, 137, 0.6617)
    assert excited.name == 'Ba137[661.700]'
    assert excited != table.get_ion(56, 137)


@pytest.mark.parametrize("Z, A, exc", [(0, 1, 0.0), (119, 300, 0.0), (10, 5, 0.0), (1, 1, -1.0)])
def test_get_ion_invalid(Z, A, exc):
    with pytest.raises(ValueError):
        ParticleTable().get_ion(Z, A, exc)


def test_bank_grows_and_registers_on_event():
    bank = PrimaryBank(capacity=2)
    electron = ParticleTable().find_particle('e-')
    events = [Event(i) for i in range(5)]
    for i, event in enumerate(events):
        bank.emit_primary(event, np.array([0.0, 0.0, i]), np.array([0.0, 0.0, 1.0]),
                          float(i + 1), electron, -1.0)

    assert len(bank) == 5
    primaries = bank.as_array()
    np.testing.assert_array_equal(primaries['event_id'], np.arange(5))
    np.testing.assert_allclose(primaries['energy'], [1, 2, 3, 4, 5])
    assert bank.particle_types == [electron] * 5
    assert len(events[3].primaries) == 1
    assert events[3].primaries[0].energy == 4.0

    stats = bank.get_statistics()
    assert stats['mean_energy'] == pytest.approx(3.0)
    assert stats['max_energy'] == 5.0
    assert "n=5" in repr(bank)


def test_bank_without_event():
    bank = PrimaryBank()
    bank.emit_primary(None, np.zeros(3), np.array([1.0, 0.0, 0.0]), 0.5,
                      ParticleTable().find_particle('gamma'), 0.0)
    assert bank.as_array()['event_id'][0] == -1
    assert PrimaryBank().get_statistics()['mean_energy'] == 0.0
