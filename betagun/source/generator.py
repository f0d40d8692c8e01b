"""
Primary generator for a beta source deposited on a sample surface.

Each event gets one primary: a position on a disk in the source plane, an
isotropic direction, and an energy drawn from the tabulated beta spectrum.
If the configured particle is a placeholder, it is replaced by the
configured ion before emission.
"""

import numpy as np
import numba
from pathlib import Path
from typing import List, Mapping, Optional, Sequence, Tuple, Union
from tqdm import tqdm

from betagun.config import load_config
from betagun.core.errors import InvalidSpectrumError
from betagun.core.particle import (
    Event,
    KinematicRecord,
    ParticleTable,
    ParticleType,
    PrimarySink,
)
from betagun.sampling.direction import DirectionSampler, validate_angles
from betagun.sampling.spectrum import RngLike, SpectrumSampler, make_rng


RADIAL_SAMPLING_MODES = ('area', 'linear')


@numba.njit(fastmath=True, cache=True)
def disk_position_from_uniforms(u_r: float, u_phi: float, radius: float,
                                z_offset: float, area_uniform: bool) -> np.ndarray:
    """
    Map two uniforms in [0, 1) onto a point of a disk at height z_offset.

    area_uniform=True gives r = R*sqrt(u) (flat density over the disk);
    False gives r = R*u, which concentrates points near the centre.
    """
    if area_uniform:
        r = radius * np.sqrt(u_r)
    else:
        r = radius * u_r
    phi = 2.0 * np.pi * u_phi

    position = np.empty(3)
    position[0] = r * np.cos(phi)
    position[1] = r * np.sin(phi)
    position[2] = z_offset
    return position


def sample_disk_position(rng: np.random.Generator, radius: float, z_offset: float,
                         radial_sampling: str = 'area') -> np.ndarray:
    """
    Draw a source position on a disk.

    Parameters:
        rng: Random generator
        radius: Disk radius [cm]
        z_offset: Plane of the disk [cm]
        radial_sampling: 'area' (uniform over the disk) or 'linear' (uniform in r)

    Returns:
        Position [x, y, z] in cm
    """
    if radial_sampling not in RADIAL_SAMPLING_MODES:
        raise ValueError(f"Unknown radial_sampling '{radial_sampling}'. "
                         f"Available: {list(RADIAL_SAMPLING_MODES)}")
    u_phi = rng.random()
    u_r = rng.random()
    return disk_position_from_uniforms(u_r, u_phi, float(radius), float(z_offset),
                                       radial_sampling == 'area')


class PrimaryGenerator:
    """
    One-primary-per-event source.

    Construction loads the spectrum; an object that exists is ready to
    generate. All draws come from a single generator stream shared by the
    position, direction and energy samplers, so a seed fixes the whole
    event sequence.

    Example:
        gen = PrimaryGenerator('K47_beta.dat', particle='chargedgeantino', rng=1)
        bank = PrimaryBank()
        gen.generate(10000, sink=bank)
    """

    def __init__(self, spectrum_file: Union[str, Path],
                 particle: Union[str, ParticleType] = 'e-',
                 ion: Tuple[int, int] = (19, 47),
                 ion_charge: float = 0.0,
                 ion_excitation_energy: float = 0.0,
                 source_radius: float = 0.5,
                 source_z: float = -0.025,
                 radial_sampling: str = 'area',
                 direction_bounds: Optional[Sequence[float]] = None,
                 rng: RngLike = None,
                 particle_table: Optional[ParticleTable] = None,
                 verbose: bool = False):
        """
        Initialize the generator.

        Parameters:
            spectrum_file: Beta spectrum table (energy [MeV], weight per line)
            particle: Particle name or type; a placeholder triggers ion substitution
            ion: (Z, A) of the ion substituted for a placeholder
            ion_charge: Charge given to the substituted ion [e+]
            ion_excitation_energy: Excitation energy of the ion [MeV]
            source_radius: Disk radius [cm]
            source_z: z of the source plane [cm]
            radial_sampling: 'area' or 'linear' (see sample_disk_position)
            direction_bounds: (theta_min, theta_max, phi_min, phi_max), default full sphere
            rng: numpy Generator, integer seed, or None
            particle_table: Ion/particle lookup (default ParticleTable())
            verbose: Print progress information
        """
        if radial_sampling not in RADIAL_SAMPLING_MODES:
            raise ValueError(f"Unknown radial_sampling '{radial_sampling}'. "
                             f"Available: {list(RADIAL_SAMPLING_MODES)}")
        if source_radius < 0.0:
            raise ValueError(f"source_radius must be >= 0, got {source_radius}")

        if direction_bounds is None:
            direction_bounds = (0.0, np.pi, 0.0, 2.0 * np.pi)
        direction_bounds = tuple(float(a) for a in direction_bounds)
        if len(direction_bounds) != 4:
            raise ValueError("direction_bounds needs (theta_min, theta_max, phi_min, phi_max)")
        validate_angles(*direction_bounds)

        self.verbose = verbose
        self.rng = make_rng(rng)
        self.particle_table = particle_table if particle_table is not None else ParticleTable()

        if isinstance(particle, ParticleType):
            self.particle_type = particle
        else:
            self.particle_type = self.particle_table.find_particle(particle)

        self.ion_Z, self.ion_A = int(ion[0]), int(ion[1])
        self.ion_charge = float(ion_charge)
        self.ion_excitation_energy = float(ion_excitation_energy)

        self.source_radius = float(source_radius)
        self.source_z = float(source_z)
        self.radial_sampling = radial_sampling
        self.direction_bounds = direction_bounds

        self.spectrum_file = Path(spectrum_file)
        self.spectrum = SpectrumSampler.from_file(self.spectrum_file, rng=self.rng,
                                                  verbose=verbose)
        if self.spectrum.edges[0] < 0.0:
            raise InvalidSpectrumError(
                f"Kinetic energies must be >= 0, spectrum in {self.spectrum_file.name} "
                f"starts at {self.spectrum.edges[0]} MeV")
        self.directions = DirectionSampler(rng=self.rng)

        self.n_generated = 0

    @classmethod
    def from_config(cls, config: Union[str, Path, Mapping, None] = None,
                    particle_table: Optional[ParticleTable] = None) -> 'PrimaryGenerator':
        """
        Build a generator from a YAML file or config mapping.

        See betagun.config.DEFAULT_CONFIG for the available keys.
        """
        cfg = load_config(config)
        if cfg['spectrum_file'] is None:
            raise ValueError("Config is missing 'spectrum_file'")

        ion = cfg['ion']
        source = cfg['source']
        direction = cfg['direction']
        return cls(
            cfg['spectrum_file'],
            particle=cfg['particle'],
            ion=(ion['Z'], ion['A']),
            ion_charge=ion['charge'],
            ion_excitation_energy=ion['excitation_energy'],
            source_radius=source['radius_cm'],
            source_z=source['z_cm'],
            radial_sampling=source['radial_sampling'],
            direction_bounds=(direction['theta_min'], direction['theta_max'],
                              direction['phi_min'], direction['phi_max']),
            rng=cfg['seed'],
            particle_table=particle_table,
            verbose=cfg['verbose'],
        )

    def resolve_particle(self) -> Tuple[ParticleType, float]:
        """Return the particle type and charge to emit."""
        if self.particle_type.placeholder:
            ion = self.particle_table.get_ion(self.ion_Z, self.ion_A,
                                              self.ion_excitation_energy)
            return ion, self.ion_charge
        return self.particle_type, self.particle_type.charge

    def generate_one(self, event: Optional[Event] = None,
                     sink: Optional[PrimarySink] = None) -> KinematicRecord:
        """
        Generate the primary of one event.

        The record is emitted to the sink only after every draw succeeded.

        Parameters:
            event: Event handle passed through to the sink
            sink: Receiver of the primary (optional)

        Returns:
            The generated record
        """
        particle_type, charge = self.resolve_particle()

        position = sample_disk_position(self.rng, self.source_radius, self.source_z,
                                        self.radial_sampling)
        direction = self.directions.sample_direction(*self.direction_bounds)
        energy = self.spectrum.sample()

        record = KinematicRecord(position, direction, energy, particle_type, charge)
        if sink is not None:
            sink.emit_primary(event, position, direction, energy, particle_type, charge)
        self.n_generated += 1
        return record

    def generate(self, n_events: int,
                 sink: Optional[PrimarySink] = None) -> Optional[List[KinematicRecord]]:
        """
        Generate n_events events, one primary each.

        Event ids continue from the number of events generated so far.

        Returns:
            The records when no sink is given; None otherwise (the sink
            holds them, so nothing is accumulated here)
        """
        if n_events < 0:
            raise ValueError(f"n_events must be >= 0, got {n_events}")

        if self.verbose:
            print(f"\nGenerating {n_events} primaries...")
            print(f"  Particle: {self.resolve_particle()[0].name}")
            print(f"  Spectrum: {self.spectrum}")
            print(f"  Source disk: R={self.source_radius} cm at z={self.source_z} cm "
                  f"({self.radial_sampling})")

        records = [] if sink is None else None
        energy_sum = 0.0
        for _ in tqdm(range(n_events), desc="Primaries", disable=not self.verbose):
            event = Event(self.n_generated)
            record = self.generate_one(event, sink)
            energy_sum += record.energy
            if records is not None:
                records.append(record)

        if self.verbose:
            mean_energy = energy_sum / n_events if n_events > 0 else 0.0
            print(f"\nGeneration complete!")
            print(f"  Events: {n_events}")
            print(f"  Mean energy: {mean_energy:.4f} MeV")

        return records

    def __repr__(self) -> str:
        return (f"PrimaryGenerator({self.spectrum_file.name}, "
                f"particle={self.particle_type.name}, n_generated={self.n_generated})")
