"""
Isotropic direction sampling inside a (theta, phi) window.

Uniform coverage of solid angle (sin(theta) dtheta dphi) requires cos(theta)
to be uniform, not theta itself; sampling theta directly would crowd the
directions around the poles.
"""

import numpy as np
import numba

from betagun.core.errors import InvalidAngleRangeError
from betagun.sampling.spectrum import RngLike, make_rng


TWO_PI = 2.0 * np.pi


def validate_angles(theta_min: float, theta_max: float,
                    phi_min: float, phi_max: float):
    """
    Check angle bounds [radians].

    Raises:
        InvalidAngleRangeError: an angle outside [0, 2pi] or theta_min >= theta_max
    """
    for name, value in (('theta_min', theta_min), ('theta_max', theta_max),
                        ('phi_min', phi_min), ('phi_max', phi_max)):
        if not 0.0 <= value <= TWO_PI:
            raise InvalidAngleRangeError(
                f"{name}={value} is outside [0, 2pi]")
    if theta_min >= theta_max:
        raise InvalidAngleRangeError(
            f"theta_min ({theta_min}) must be smaller than theta_max ({theta_max})")


@numba.njit(fastmath=True, cache=True)
def direction_from_uniforms(u_phi: float, u_cos: float,
                            cos_theta_min: float, cos_theta_max: float,
                            phi_min: float, phi_max: float) -> np.ndarray:
    """
    Map two uniforms in [0, 1) onto a unit vector.

    Returns:
        (sin(theta) cos(phi), sin(theta) sin(phi), cos(theta))
    """
    phi = phi_min + u_phi * (phi_max - phi_min)
    cos_theta = cos_theta_max + u_cos * (cos_theta_min - cos_theta_max)
    theta = np.arccos(cos_theta)
    sin_theta = np.sin(theta)

    direction = np.empty(3)
    direction[0] = sin_theta * np.cos(phi)
    direction[1] = sin_theta * np.sin(phi)
    direction[2] = cos_theta
    return direction


class DirectionSampler:
    """
    Random unit vectors uniform over a solid-angle window.

    Usage:
        sampler = DirectionSampler(rng=42)
        d = sampler.sample_direction()                          # full sphere
        d = sampler.sample_direction(0.0, np.pi / 6)            # forward cone
        ds = sampler.sample_directions(1000, 0.0, np.pi / 2)    # hemisphere

    Not safe to call concurrently on a shared generator.
    """

    def __init__(self, rng: RngLike = None):
        """
        Parameters:
            rng: numpy Generator, integer seed, or None
        """
        self.rng = make_rng(rng)

    def sample_direction(self, theta_min: float = 0.0, theta_max: float = np.pi,
                         phi_min: float = 0.0, phi_max: float = TWO_PI) -> np.ndarray:
        """
        Draw one direction.

        Parameters:
            theta_min, theta_max: Polar angle bounds from +z [radians]
            phi_min, phi_max: Azimuth bounds [radians]

        Returns:
            Unit vector [x, y, z]
        """
        validate_angles(theta_min, theta_max, phi_min, phi_max)
        u_phi = self.rng.random()
        u_cos = self.rng.random()
        return direction_from_uniforms(u_phi, u_cos, np.cos(theta_min), np.cos(theta_max),
                                       float(phi_min), float(phi_max))

    def sample_directions(self, n: int, theta_min: float = 0.0, theta_max: float = np.pi,
                          phi_min: float = 0.0, phi_max: float = TWO_PI) -> np.ndarray:
        """Draw n directions; returns an (n, 3) array."""
        if n < 0:
            raise ValueError(f"n must be >= 0, got {n}")
        validate_angles(theta_min, theta_max, phi_min, phi_max)

        u = self.rng.random((int(n), 2))
        cos_min = np.cos(theta_min)
        cos_max = np.cos(theta_max)
        phi = phi_min + u[:, 0] * (phi_max - phi_min)
        cos_theta = cos_max + u[:, 1] * (cos_min - cos_max)
        sin_theta = np.sin(np.arccos(cos_theta))

        return np.stack([sin_theta * np.cos(phi),
                         sin_theta * np.sin(phi),
                         cos_theta], axis=1)
