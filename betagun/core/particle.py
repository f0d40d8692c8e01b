"""
Particle definitions, ion lookup and primary-vertex storage.

Primaries are kept in a NumPy structured array so that a batch of generated
events can be handed to vectorised analysis code without conversion.
"""

import numpy as np
from typing import Any, Dict, Optional, Protocol, Tuple


# Storage layout for emitted primaries
PRIMARY_DTYPE = np.dtype([
    ('position', np.float64, 3),      # x, y, z [cm]
    ('direction', np.float64, 3),     # unit vector
    ('energy', np.float64),           # kinetic energy [MeV]
    ('A', np.int32),                  # mass number
    ('Z', np.int32),                  # atomic number
    ('charge', np.float64),           # charge [e+]
    ('event_id', np.int64),
])

ELEMENT_SYMBOLS = (
    "H He Li Be B C N O F Ne Na Mg Al Si P S Cl Ar K Ca Sc Ti V Cr Mn Fe Co "
    "Ni Cu Zn Ga Ge As Se Br Kr Rb Sr Y Zr Nb Mo Tc Ru Rh Pd Ag Cd In Sn Sb "
    "Te I Xe Cs Ba La Ce Pr Nd Pm Sm Eu Gd Tb Dy Ho Er Tm Yb Lu Hf Ta W Re "
    "Os Ir Pt Au Hg Tl Pb Bi Po At Rn Fr Ra Ac Th Pa U Np Pu Am Cm Bk Cf Es "
    "Fm Md No Lr Rf Db Sg Bh Hs Mt Ds Rg Cn Nh Fl Mc Lv Ts Og"
).split()


class ParticleType:
    """
    Species of a primary particle.

    A placeholder type marks "no concrete species yet"; the generator swaps
    it for an ion from the particle table before the event is emitted.
    """

    def __init__(self, name: str, A: int = 0, Z: int = 0, charge: float = 0.0,
                 excitation_energy: float = 0.0, placeholder: bool = False):
        """
        Parameters:
            name: Particle name (e.g. 'e-', 'K47')
            A: Mass number
            Z: Atomic number
            charge: Charge [e+]
            excitation_energy: Nuclear excitation energy [MeV]
            placeholder: True for an unresolved marker type
        """
        self.name = name
        self.A = A
        self.Z = Z
        self.charge = charge
        self.excitation_energy = excitation_energy
        self.placeholder = placeholder

    @classmethod
    def placeholder_type(cls, name: str = 'chargedgeantino') -> 'ParticleType':
        """Build an unresolved marker type (charge +1, no nucleons)."""
        return cls(name, A=0, Z=0, charge=1.0, placeholder=True)

    @property
    def is_ion(self) -> bool:
        return not self.placeholder and self.A > 1 and self.Z >= 1

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ParticleType):
            return NotImplemented
        return (self.name, self.A, self.Z, self.charge, self.excitation_energy,
                self.placeholder) == (other.name, other.A, other.Z, other.charge,
                                      other.excitation_energy, other.placeholder)

    def __hash__(self) -> int:
        return hash((self.name, self.A, self.Z, self.excitation_energy, self.placeholder))

    def __repr__(self) -> str:
        tag = ", placeholder" if self.placeholder else ""
        return f"ParticleType({self.name!r}, A={self.A}, Z={self.Z}, q={self.charge:+g}{tag})"


CHARGED_GEANTINO = ParticleType.placeholder_type('chargedgeantino')


class ParticleTable:
    """
    Lookup of named particles and ions.

    Usage:
        table = ParticleTable()
        electron = table.find_particle('e-')
        k47 = table.get_ion(19, 47)
    """

    # name -> (A, Z, charge)
    PARTICLES = {
        'e-': (0, 0, -1.0),
        'e+': (0, 0, 1.0),
        'gamma': (0, 0, 0.0),
        'proton': (1, 1, 1.0),
        'neutron': (1, 0, 0.0),
        'deuteron': (2, 1, 1.0),
        'triton': (3, 1, 1.0),
        'He-3': (3, 2, 2.0),
        'alpha': (4, 2, 2.0),
        'C-12': (12, 6, 6.0),
        'O-16': (16, 8, 8.0),
    }

    def __init__(self):
        self._ions: Dict[Tuple[int, int, float], ParticleType] = {}

    def find_particle(self, name: str) -> ParticleType:
        """
        Look up a particle by name.

        Raises:
            ValueError: Unknown particle name
        """
        if name == CHARGED_GEANTINO.name:
            return CHARGED_GEANTINO
        if name not in self.PARTICLES:
            raise ValueError(f"Unknown particle '{name}'. "
                             f"Available: {[CHARGED_GEANTINO.name] + list(self.PARTICLES.keys())}")
        A, Z, charge = self.PARTICLES[name]
        return ParticleType(name, A=A, Z=Z, charge=charge)

    def get_ion(self, Z: int, A: int, excitation_energy: float = 0.0) -> ParticleType:
        """
        Return the ion with atomic number Z and mass number A.

        The ion is fully stripped (charge = Z); callers that need a
        different charge state set it on the emitted primary.

        Parameters:
            Z: Atomic number (1..118)
            A: Mass number (>= Z)
            excitation_energy: Excitation energy [MeV]
        """
        Z = int(Z)
        A = int(A)
        if not 1 <= Z <= len(ELEMENT_SYMBOLS):
            raise ValueError(f"Atomic number out of range: Z={Z}")
        if A < Z:
            raise ValueError(f"Mass number must be >= Z, got A={A}, Z={Z}")
        if excitation_energy < 0.0:
            raise ValueError(f"Excitation energy must be >= 0, got {excitation_energy}")

        key = (Z, A, float(excitation_energy))
        ion = self._ions.get(key)
        if ion is None:
            name = f"{ELEMENT_SYMBOLS[Z - 1]}{A}"
            if excitation_energy > 0.0:
                name += f"[{excitation_energy * 1e3:.3f}]"  # keV, as in ion tables
            ion = ParticleType(name, A=A, Z=Z, charge=float(Z),
                               excitation_energy=float(excitation_energy))
            self._ions[key] = ion
        return ion


class KinematicRecord:
    """Initial state of one primary particle."""

    __slots__ = ('position', 'direction', 'energy', 'particle_type', 'charge')

    def __init__(self, position: np.ndarray, direction: np.ndarray, energy: float,
                 particle_type: ParticleType, charge: float):
        self.position = np.asarray(position, dtype=np.float64)
        self.direction = np.asarray(direction, dtype=np.float64)
        self.energy = float(energy)
        self.particle_type = particle_type
        self.charge = float(charge)

    def __repr__(self) -> str:
        x, y, z = self.position
        u, v, w = self.direction
        return (f"KinematicRecord({self.particle_type.name}, E={self.energy:.4f} MeV, "
                f"pos=({x:.4f}, {y:.4f}, {z:.4f}) cm, dir=({u:.3f}, {v:.3f}, {w:.3f}))")


class Event:
    """Event handle onto which primary vertices are registered."""

    def __init__(self, event_id: int):
        self.event_id = event_id
        self.primaries = []

    def add_primary_vertex(self, record: KinematicRecord):
        self.primaries.append(record)

    def __repr__(self) -> str:
        return f"Event(id={self.event_id}, n_primaries={len(self.primaries)})"


class PrimarySink(Protocol):
    """Anything that accepts a generated primary for transport."""

    def emit_primary(self, event: Optional[Event], position: np.ndarray,
                     direction: np.ndarray, energy: float,
                     particle_type: ParticleType, charge: float) -> None:
        ...


class PrimaryBank:
    """In-memory sink collecting emitted primaries."""

    def __init__(self, capacity: int = 1024):
        """
        Parameters:
            capacity: Initial number of slots (grows automatically)
        """
        self.primaries = np.zeros(max(int(capacity), 1), dtype=PRIMARY_DTYPE)
        self.particle_types = []
        self.n_primaries = 0

    def emit_primary(self, event: Optional[Event], position: np.ndarray,
                     direction: np.ndarray, energy: float,
                     particle_type: ParticleType, charge: float) -> None:
        """Store one primary and register it on the event, if any."""
        if self.n_primaries == len(self.primaries):
            grown = np.zeros(2 * len(self.primaries), dtype=PRIMARY_DTYPE)
            grown[:self.n_primaries] = self.primaries
            self.primaries = grown

        i = self.n_primaries
        self.primaries['position'][i] = position
        self.primaries['direction'][i] = direction
        self.primaries['energy'][i] = energy
        self.primaries['A'][i] = particle_type.A
        self.primaries['Z'][i] = particle_type.Z
        self.primaries['charge'][i] = charge
        self.primaries['event_id'][i] = event.event_id if event is not None else -1
        self.particle_types.append(particle_type)
        self.n_primaries += 1

        if event is not None:
            event.add_primary_vertex(
                KinematicRecord(position, direction, energy, particle_type, charge))

    def as_array(self) -> np.ndarray:
        """View of the filled part of the storage array."""
        return self.primaries[:self.n_primaries]

    def __len__(self) -> int:
        return self.n_primaries

    def get_statistics(self) -> dict:
        """Get statistics about the stored primaries."""
        energies = self.as_array()['energy']

        return {
            'n_primaries': self.n_primaries,
            'mean_energy': float(np.mean(energies)) if len(energies) > 0 else 0.0,
            'max_energy': float(np.max(energies)) if len(energies) > 0 else 0.0,
            'min_energy': float(np.min(energies)) if len(energies) > 0 else 0.0,
        }

    def __repr__(self) -> str:
        stats = self.get_statistics()
        return (f"PrimaryBank(n={stats['n_primaries']}, "
                f"<E>={stats['mean_energy']:.3f} MeV)")
