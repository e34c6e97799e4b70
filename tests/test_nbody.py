import numpy as np
import pytest

from accelkit.nbody import (
    STEP_SIZE,
    CylinderDistribution,
    ForceKind,
    GravSim,
    IntegratorKind,
    Particle,
    SphereDistribution,
)


def _pair(force=ForceKind.GRAVITY, integrator=IntegratorKind.EULER, charges=None):
    sim = GravSim([[0, 0, 0], [0, 0, 0]], [[-1, 0, 0], [1, 0, 0]], charges)
    sim.force = force
    sim.integrator = integrator
    return sim


def test_default_settings_follow_source():
    sim = GravSim([[0, 0, 0]], [[0, 0, 0]])
    assert sim.force is ForceKind.GRAVITY
    assert sim.grav_G == 1e-5
    assert sim.grav_damping == 1e-5
    assert sim.lj_eps == 1.0
    assert sim.lj_sigma == 1e-3
    assert sim.time == 0.0


@pytest.mark.parametrize("integrator", list(IntegratorKind))
@pytest.mark.parametrize("force", [ForceKind.GRAVITY, ForceKind.LENNARD_JONES])
def test_single_free_body_moves_in_straight_line(force, integrator):
    sim = GravSim([[1.0, 2.0, -3.0]], [[4.0, 5.0, 6.0]])
    sim.force = force
    sim.integrator = integrator
    sim.step()
    np.testing.assert_allclose(sim.velocities(), [[1.0, 2.0, -3.0]])
    np.testing.assert_allclose(
        sim.positions(), np.array([[4.0, 5.0, 6.0]]) + STEP_SIZE * np.array([[1.0, 2.0, -3.0]])
    )


def test_time_advances_by_step_size():
    sim = _pair()
    sim.step()
    sim.step()
    assert sim.time == pytest.approx(2 * STEP_SIZE)


@pytest.mark.parametrize("integrator", list(IntegratorKind))
def test_gravity_attracts_and_conserves_momentum(integrator):
    sim = _pair(integrator=integrator)
    for _ in range(3):
        sim.step()
    vel = sim.velocities()
    assert vel[0, 0] > 0
    assert vel[1, 0] < 0
    np.testing.assert_allclose(vel.sum(axis=0), 0.0, atol=1e-15)


def test_gravity_scales_with_constant():
    a = _pair()
    b = _pair()
    b.grav_G = a.grav_G * 2
    a.step()
    b.step()
    np.testing.assert_allclose(b.velocities(), 2 * a.velocities())


def test_lennard_jones_conserves_momentum():
    sim = _pair(force=ForceKind.LENNARD_JONES, integrator=IntegratorKind.RK4)
    sim.lj_sigma = 1.0
    sim.step()
    vel = sim.velocities()
    assert vel[0, 0] != 0.0
    np.testing.assert_allclose(vel.sum(axis=0), 0.0, atol=1e-15)


def test_coulomb_requires_charges():
    sim = _pair(force=ForceKind.COULOMB)
    with pytest.raises(RuntimeError):
        sim.step()


def test_coulomb_like_charges_pull_together():
    sim = _pair(force=ForceKind.COULOMB, charges=[1.0, 1.0])
    sim.step()
    vel = sim.velocities()
    assert vel[0, 0] > 0
    assert vel[1, 0] < 0
    np.testing.assert_allclose(vel.sum(axis=0), 0.0, atol=1e-15)


def test_coulomb_uncharged_bodies_are_free():
    sim = _pair(force=ForceKind.COULOMB, charges=[0.0, 1.0])
    sim.step()
    np.testing.assert_allclose(sim.velocities(), 0.0)
    np.testing.assert_allclose(sim.positions(), [[-1, 0, 0], [1, 0, 0]])


def test_from_particles_places_bodies_at_rest():
    particles = [Particle(1.0, (1.0, 2.0, 3.0)), Particle(-2.0, (4.0, 5.0, 6.0))]
    sim = GravSim.from_particles(particles)
    assert sim.n_bodies == 2
    np.testing.assert_allclose(sim.positions(), [[1, 2, 3], [4, 5, 6]])
    np.testing.assert_allclose(sim.velocities(), 0.0)


def test_from_particles_rejects_bad_position():
    with pytest.raises(ValueError):
        GravSim.from_particles([Particle(1.0, (1.0, 2.0))])


def test_cylinder_distribution_invariants():
    params = CylinderDistribution(radius=(2.0, 10.0), height=(-1.0, 3.0), speed=4.0)
    sim = GravSim.from_cylinder(200, params, np.random.default_rng(7))
    pos = sim.positions()
    vel = sim.velocities()
    r = np.hypot(pos[:, 0], pos[:, 2])
    assert pos.shape == (200, 3)
    assert np.all(r >= 2.0 - 1e-9) and np.all(r <= 10.0 + 1e-9)
    assert np.all(pos[:, 1] >= -1.0) and np.all(pos[:, 1] <= 3.0)
    np.testing.assert_allclose(vel[:, 1], 0.0)
    np.testing.assert_allclose(vel[:, 0] * pos[:, 0] + vel[:, 2] * pos[:, 2], 0.0, atol=1e-9)
    np.testing.assert_allclose(np.linalg.norm(vel, axis=1), r * 4.0 / 10.0)


def test_cylinder_is_reproducible_with_seed():
    a = GravSim.from_cylinder(10, CylinderDistribution(), np.random.default_rng(3))
    b = GravSim.from_cylinder(10, CylinderDistribution(), np.random.default_rng(3))
    np.testing.assert_array_equal(a.positions(), b.positions())
    np.testing.assert_array_equal(a.velocities(), b.velocities())


def test_cylinder_rejects_zero_outer_radius():
    with pytest.raises(ValueError):
        GravSim.from_cylinder(4, CylinderDistribution(radius=(0.0, 0.0)), np.random.default_rng(0))


def test_sphere_distribution_invariants():
    params = SphereDistribution(radius=(3.0, 8.0))
    sim = GravSim.from_sphere(300, params, np.random.default_rng(11))
    r = np.linalg.norm(sim.positions(), axis=1)
    assert np.all(r >= 3.0 - 1e-9) and np.all(r <= 8.0 + 1e-9)
    np.testing.assert_allclose(sim.velocities(), 0.0)


def test_returned_arrays_are_copies():
    sim = _pair()
    sim.positions()[0, 0] = 99.0
    sim.velocities()[0, 0] = 99.0
    assert sim.positions()[0, 0] == -1.0
    assert sim.velocities()[0, 0] == 0.0


def test_mismatched_shapes_rejected():
    with pytest.raises(ValueError):
        GravSim([[0, 0, 0]], [[0, 0, 0], [1, 1, 1]])
    with pytest.raises(ValueError):
        GravSim([[0, 0]], [[0, 0]])
    with pytest.raises(ValueError):
        GravSim([[0, 0, 0]], [[0, 0, 0]], [1.0, 2.0])


def test_empty_simulation_steps():
    sim = GravSim.from_sphere(0, SphereDistribution(), np.random.default_rng(0))
    sim.step()
    assert sim.positions().shape == (0, 3)
    assert sim.time == pytest.approx(STEP_SIZE)