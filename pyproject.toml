[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "accelkit"
version = "0.1.0"
description = "Game of Life, Mandelbrot and N-body simulations, Euler and RK4 integrators, and virtual pointer allocators, built on NumPy"
requires-python = ">=3.10"
dependencies = ["numpy"]
keywords = [
    "simulation",
    "n-body",
    "game of life",
    "mandelbrot",
    "runge-kutta",
    "euler",
    "allocator",
    "double buffer",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering",
    "Topic :: Scientific/Engineering :: Mathematics",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["accelkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
