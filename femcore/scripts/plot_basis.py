#! /usr/bin/env python
from femcore.constants import PLOT_RESOLUTION
from femcore.finite_elements import LagrangeElement, OrthogonalElement, lagrange_points
from femcore.reference_elements import ReferenceInterval, ReferenceTriangle
from argparse import ArgumentParser
import logging
import matplotlib.pyplot as plt
import numpy as np

CELLS = {"interval": ReferenceInterval, "triangle": ReferenceTriangle}
ELEMENTS = {"lagrange": LagrangeElement, "orthogonal": OrthogonalElement}


def plot_basis_function(element, index, grad=False, resolution=PLOT_RESOLUTION):
    """Plot one basis function of an element over its reference cell."""
    points = lagrange_points(element.cell, resolution)
    values = element.tabulate(points, grad=grad)[:, index]
    if grad:
        # Plot the magnitude of the gradient
        values = np.linalg.norm(values, axis=-1)

    fig, ax = plt.subplots()
    if element.cell.dim == 1:
        order = np.argsort(points[:, 0])
        ax.plot(points[order, 0], values[order])
        ax.plot(element.cell.vertices[:, 0], [0.0, 0.0], "ko")
        ax.set_xlabel(r"$x$")
    else:
        tpc = ax.tripcolor(points[:, 0], points[:, 1], values, shading="gouraud")
        fig.colorbar(tpc, ax=ax)
        ax.set_aspect("equal")
        ax.set_xlabel(r"$x$")
        ax.set_ylabel(r"$y$")

    label = r"|\nabla \phi|" if grad else r"\phi"
    ax.set_title(f"${label}_{{{index}}}$ of {element!r}")
    return fig


def plot_basis():
    parser = ArgumentParser()
    parser.add_help = """Plot a basis function of a reference element."""
    parser.add_argument("element", choices=list(ELEMENTS), help="The element family.")
    parser.add_argument("degree", type=int, help="The polynomial degree.")
    parser.add_argument("index", type=int, help="The basis function to plot.")
    parser.add_argument(
        "--cell", choices=list(CELLS), default="triangle", help="The reference cell."
    )
    parser.add_argument(
        "--grad", action="store_true", help="Plot the gradient magnitude instead."
    )
    parser.add_argument(
        "--resolution",
        type=int,
        default=PLOT_RESOLUTION,
        help="Subdivisions per edge of the plotting grid.",
    )
    parser.add_argument("--output", type=str, help="Save the figure to this path.")
    parser.add_argument("--verbose", action="store_true", help="Log debug messages.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    element = ELEMENTS[args.element](CELLS[args.cell], args.degree)
    if not 0 <= args.index < element.get_number_of_bases():
        parser.error(
            f"index must be below {element.get_number_of_bases()} for {element!r}"
        )

    fig = plot_basis_function(element, args.index, args.grad, args.resolution)

    if args.output:
        fig.savefig(args.output)
    else:
        plt.show()


if __name__ == "__main__":
    plot_basis()
