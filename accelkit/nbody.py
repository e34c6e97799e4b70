"""N-body simulation under gravity, Lennard-Jones or Coulomb forces."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Iterable, Optional, Sequence

import numpy as np

from accelkit.doublebuf import DoubleBuffer
from accelkit.integrator import integrate_step_euler, integrate_step_rk4

__all__ = [
    "STEP_SIZE",
    "ForceKind",
    "IntegratorKind",
    "CylinderDistribution",
    "SphereDistribution",
    "Particle",
    "GravSim",
]

# Size of a single time step.
STEP_SIZE = 0.5

# Added to the distance term of a body with itself so that it exerts no force.
_SELF_SHIELD = 1e24


class ForceKind(Enum):
    """The kind of force acting between bodies."""

    GRAVITY = auto()
    LENNARD_JONES = auto()
    COULOMB = auto()


class IntegratorKind(Enum):
    """Which integration method advances the bodies."""

    EULER = auto()
    RK4 = auto()


@dataclass(frozen=True)
class CylinderDistribution:
    """Bodies placed uniformly in a cylinder slice, rotating about the y axis.

    ``speed`` is the speed of the outermost bodies.
    """

    radius: tuple[float, float] = (0.0, 25.0)
    angle: tuple[float, float] = (0.0, 2 * math.pi)
    height: tuple[float, float] = (-5.0, 5.0)
    speed: float = 1.0


@dataclass(frozen=True)
class SphereDistribution:
    """Bodies placed uniformly in a spherical shell, at rest."""

    radius: tuple[float, float] = (0.0, 25.0)


@dataclass(frozen=True)
class Particle:
    """A charged particle at a position."""

    charge: float
    pos: tuple[float, float, float]


@dataclass
class _Bodies:
    vel: np.ndarray
    pos: np.ndarray


def _as_rng(rng: Optional[np.random.Generator]) -> np.random.Generator:
    return np.random.default_rng() if rng is None else rng


class GravSim:
    """Double-buffered velocities and positions of interacting bodies.

    The force and integrator used by :meth:`step` are chosen through the
    ``force`` and ``integrator`` attributes; the force constants are the
    ``grav_G``, ``grav_damping``, ``lj_eps`` and ``lj_sigma`` attributes.
    """

    def __init__(
        self,
        velocities: Sequence[Sequence[float]],
        positions: Sequence[Sequence[float]],
        charges: Optional[Sequence[float]] = None,
    ) -> None:
        vel = np.array(velocities, dtype=np.float64).reshape(-1, 3) if len(velocities) == 0 else np.array(velocities, dtype=np.float64)
        pos = np.array(positions, dtype=np.float64).reshape(-1, 3) if len(positions) == 0 else np.array(positions, dtype=np.float64)
        if vel.ndim != 2 or vel.shape[1] != 3:
            raise ValueError(f"velocities must have shape (n, 3), got {vel.shape}")
        if pos.shape != vel.shape:
            raise ValueError(
                f"positions shape {pos.shape} does not match velocities shape {vel.shape}"
            )
        n = vel.shape[0]
        if charges is not None:
            charge_arr = np.array(charges, dtype=np.float64)
            if charge_arr.shape != (n,):
                raise ValueError(
                    f"charges must have shape ({n},), got {charge_arr.shape}"
                )
            self._charges: Optional[np.ndarray] = charge_arr
        else:
            self._charges = None

        self.n_bodies = n
        self.time = 0.0
        self.force = ForceKind.GRAVITY
        self.integrator = IntegratorKind.EULER
        self.grav_G = 1e-5
        self.grav_damping = 1e-5
        self.lj_eps = 1.0
        self.lj_sigma = 1e-3

        self._bodies: DoubleBuffer[_Bodies] = DoubleBuffer(
            lambda: _Bodies(np.zeros((n, 3)), np.zeros((n, 3)))
        )
        fresh = self._bodies.write()
        fresh.vel[...] = vel
        fresh.pos[...] = pos
        self._bodies.swap()

    @classmethod
    def from_cylinder(
        cls,
        n_bodies: int,
        params: CylinderDistribution = CylinderDistribution(),
        rng: Optional[np.random.Generator] = None,
    ) -> "GravSim":
        """Bodies distributed uniformly in a cylinder, moving tangentially."""
        if n_bodies < 0:
            raise ValueError("number of bodies must be non-negative")
        rmin, rmax = params.radius
        if rmax == 0:
            raise ValueError("maximum radius must be non-zero")
        gen = _as_rng(rng)
        r = np.sqrt(gen.uniform(rmin * rmin, rmax * rmax, n_bodies))
        phi = gen.uniform(params.angle[0], params.angle[1], n_bodies)
        y = gen.uniform(params.height[0], params.height[1], n_bodies)

        # Velocity is the derivative of position with respect to phi.
        vel = np.stack([-r * np.sin(phi), np.zeros(n_bodies), r * np.cos(phi)], axis=1)
        vel *= params.speed / rmax
        pos = np.stack([r * np.cos(phi), y, r * np.sin(phi)], axis=1)
        return cls(vel, pos)

    @classmethod
    def from_sphere(
        cls,
        n_bodies: int,
        params: SphereDistribution = SphereDistribution(),
        rng: Optional[np.random.Generator] = None,
    ) -> "GravSim":
        """Bodies distributed uniformly in a spherical shell, at rest."""
        if n_bodies < 0:
            raise ValueError("number of bodies must be non-negative")
        gen = _as_rng(rng)
        rmin, rmax = params.radius
        u = gen.uniform(rmin**3, rmax**3, n_bodies)
        cost = gen.uniform(-1.0, 1.0, n_bodies)
        phi = gen.uniform(0.0, 2 * 3.141592, n_bodies)
        r = np.cbrt(u)
        sint = np.sqrt(1.0 - cost * cost)
        pos = np.stack(
            [r * sint * np.cos(phi), r * sint * np.sin(phi), r * cost], axis=1
        )
        return cls(np.zeros((n_bodies, 3)), pos)

    @classmethod
    def from_particles(cls, particles: Iterable[Particle]) -> "GravSim":
        """Charged particles at rest, for use with the Coulomb force."""
        items = list(particles)
        pos = [tuple(p.pos) for p in items]
        if any(len(p) != 3 for p in pos):
            raise ValueError("particle positions must have three components")
        return cls(
            np.zeros((len(items), 3)),
            np.array(pos, dtype=np.float64).reshape(-1, 3),
            [p.charge for p in items],
        )

    def _acceleration(self, sources: np.ndarray) -> Callable[..., np.ndarray]:
        n = sources.shape[0]
        shield = _SELF_SHIELD * np.eye(n)

        def pairwise(x: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
            diff = sources[None, :, :] - x[:, None, :]
            return diff, np.sqrt(np.sum(diff * diff, axis=-1))

        if self.force is ForceKind.GRAVITY:
            G, damping = self.grav_G, self.grav_damping

            def accel(vel, x, t):
                diff, r = pairwise(x)
                denom = r**3 + shield + damping
                return G * np.sum(diff / denom[..., None], axis=1)

        elif self.force is ForceKind.LENNARD_JONES:
            A = 24.0 * self.lj_eps * self.lj_sigma

            def accel(vel, x, t):
                diff, r = pairwise(x)
                r = r + shield
                coeff = r**-8.0 - 2.0 * r**-14.0
                return A * np.sum(coeff[..., None] * diff, axis=1)

        elif self.force is ForceKind.COULOMB:
            if self._charges is None:
                raise RuntimeError("Coulomb charge buffer wasn't initialized!")
            charges = self._charges

            def accel(vel, x, t):
                diff, r = pairwise(x)
                denom = r**3 + shield
                acc = np.sum(charges[None, :, None] * diff / denom[..., None], axis=1)
                return charges[:, None] * acc

        else:
            raise ValueError(f"unknown force kind {self.force!r}")
        return accel

    def step(self) -> None:
        """Advance every body by one time step."""
        current = self._bodies.read()
        func = self._acceleration(current.pos)
        if self.integrator is IntegratorKind.EULER:
            integrate = integrate_step_euler
        elif self.integrator is IntegratorKind.RK4:
            integrate = integrate_step_rk4
        else:
            raise ValueError(f"unknown integrator {self.integrator!r}")

        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            new_vel, new_pos, _ = integrate(
                func, STEP_SIZE, current.vel, current.pos, self.time
            )

        out = self._bodies.write()
        out.vel[...] = new_vel
        out.pos[...] = new_pos
        self._bodies.swap()
        self.time += STEP_SIZE

    def velocities(self) -> np.ndarray:
        """Copy of the current velocities, shape ``(n, 3)``."""
        return self._bodies.read().vel.copy()

    def positions(self) -> np.ndarray:
        """Copy of the current positions, shape ``(n, 3)``."""
        return self._bodies.read().pos.copy()