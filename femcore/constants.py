"""Numerical defaults for femcore."""

NEWTON_TOLERANCE = 1e-14  # Absolute step size at which a Gauss-Jacobi root is accepted
NEWTON_MAX_ITERATIONS = 100

PLOT_RESOLUTION = 40  # Subdivisions per edge when plotting on a reference cell
