# accelkit

Small NumPy-based simulations, ODE integrators and helpers that hand out integer "pointers" for buffers.

## Modules

- `accelkit.doublebuf.DoubleBuffer`: builds two values from one factory. `read()` and `write()` return the two values, and `swap()` exchanges their roles.
- `accelkit.integrator`: the tuple helpers `add_tuples`, `scale_tuple` and `squash_tuple`, and the single-step integrators `integrate_step_euler` and `integrate_step_rk4`.
  - The state is passed as `y(N-1), ..., y1, y, t`.
  - `func` receives the state and returns the N-th derivative.
  - Elements may be numbers or NumPy arrays.
  - Fewer than two state values raise `ValueError`.
- `accelkit.life`: Conway's Game of Life on a grid that wraps at the edges.
  - `GameOfLifeSim.add_click(x, y, state)` queues a cell change. Queued changes are applied at the start of the next `step()`.
  - `cells()`, `velocities()` and `image()` return copies of the cell states, the per-cell "velocity" and an RGBA image of shape `(height, width, 4)`.
- `accelkit.mandelbrot`: `how_mandel(re, im)` gives the smoothed escape count of a point. `colour_for(mandelness)` maps that count to an RGBA tuple from a 16-entry `PALETTE`.
  - `MandelbrotCalculator` renders a rectangle of the complex plane.
  - Call `set_bounds(min_x, max_x, min_y, max_y)`, then `calc()`, then `image()`.
- `accelkit.nbody.GravSim`: N bodies with double-buffered velocities and positions.
  - Build it from arrays, or with `from_cylinder`, `from_sphere` (both take an optional `numpy.random.Generator`) or `from_particles`.
  - Choose the force with the `force` attribute: `ForceKind.GRAVITY`, `LENNARD_JONES` or `COULOMB`.
  - Choose the method with `integrator`: `IntegratorKind.EULER` or `RK4`.
  - Tune the force with `grav_G`, `grav_damping`, `lj_eps` and `lj_sigma`.
  - Each `step()` advances by `STEP_SIZE` (0.5).
  - Coulomb needs charges, which `from_particles` supplies. Without them `step()` raises `RuntimeError`.
- `accelkit.vptr.PointerMapper`: gives each registered buffer an integer address.
  - Addresses start at a base address, 4096 by default.
  - Freed blocks are reused. Free neighbours are fused, and a free block at the end is dropped.
  - `get_offset` returns the offset of an address inside its block, and `get_element_offset` returns it in items.
  - `allocate`, `release` and `release_all` are malloc/free-style helpers. `allocate(0, mapper)` returns 0, the null pointer.
- `accelkit.legacy`: `LegacyPointerMapper` stores a 16-bit buffer id in the top bits of a 64-bit pointer and an offset in the low 48 bits.
  - `malloc(size)`, `free(ptr)` and `clear()` use a process-wide mapper, which `get_pointer_mapper()` returns.

## Install

```
pip install .
```

## Examples

Integrate `y'' = -y` with one RK4 step:

```python
from accelkit.integrator import integrate_step_rk4

vel, pos, t = integrate_step_rk4(lambda v, y, t: -y, 0.1, 0.0, 1.0, 0.0)
```

Run a generation of Life:

```python
from accelkit.life import GameOfLifeSim, CellState

sim = GameOfLifeSim(32, 32)
for x in (10, 11, 12):
    sim.add_click(x, 10, CellState.LIVE)
sim.step()
print(sim.cells())
```

Render a Mandelbrot image:

```python
from accelkit.mandelbrot import MandelbrotCalculator

calc = MandelbrotCalculator(80, 60)
calc.set_bounds(-2.0, 1.0, -1.0, 1.0)
calc.calc()
rgba = calc.image()   # shape (60, 80, 4), dtype uint8
```

Step an N-body system with RK4:

```python
import numpy as np
from accelkit.nbody import GravSim, IntegratorKind, SphereDistribution

sim = GravSim.from_sphere(64, SphereDistribution((0.0, 10.0)), np.random.default_rng(1))
sim.integrator = IntegratorKind.RK4
sim.step()
print(sim.positions().shape)   # (64, 3)
```

Allocate and free virtual pointers:

```python
from accelkit.vptr import PointerMapper, allocate, release

mapper = PointerMapper(4096)
a = allocate(100, mapper)
b = allocate(50, mapper)
release(a, mapper, True)
print(mapper.count())   # 1
```

## What it does not do

The package computes simulation state and images as NumPy arrays. It does not:

- open windows or draw anything;
- read mouse or keyboard input;
- run on a GPU;
- provide a command-line program.

To display the images, pass them to a plotting or imaging library of your choice.

## Tests

```
pip install .[test]
pytest
```