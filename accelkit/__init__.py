"""Game of Life, Mandelbrot and N-body simulations, ODE integrators and virtual pointer mappers."""

__version__ = "0.1.0"

__all__ = ["doublebuf", "integrator", "life", "mandelbrot", "nbody", "vptr", "legacy"]