# cst_fem/cli.py
"""
Command-line entry point.

    cst-fem <input-file> <output-file> [--csv-dir DIR] [--plot PATH] ...

Exit status:
    0  success
    2  usage error (wrong arguments)
    3  input unreadable or output unwritable
    4  malformed input or inconsistent model
    5  degenerate element (collinear nodes)
    6  singular system (insufficient constraints / isolated node)
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from .analysis import run_analysis
from .config import SolverConfig
from .elements import DegenerateElementError
from .io import ParseError, load_model, write_results
from .model import ModelError
from .post import elements_table, nodes_table
from .kernel.solve import SingularSystemError

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_IO = 3
EXIT_INPUT = 4
EXIT_GEOMETRY = 5
EXIT_SINGULAR = 6

logger = logging.getLogger("cst_fem")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cst-fem",
        description="2D plane-stress FEM with constant-strain triangles: "
                    "nodal displacements and element von Mises stress.",
    )
    parser.add_argument("input", help="input file (material, nodes, elements, constraints, loads)")
    parser.add_argument("output", help="output file (displacements, then von Mises per element)")
    parser.add_argument("--csv-dir", default=None,
                        help="also write nodes.csv and elements.csv to this directory")
    parser.add_argument("--plot", default=None,
                        help="also save a von Mises plot to this image file")
    parser.add_argument("--scale", type=float, default=None,
                        help="deformation scale for --plot (default: automatic)")
    parser.add_argument("--format", dest="float_format", default="%.6g",
                        help="printf-style format of output values (default: %%.6g)")
    parser.add_argument("--degenerate-tol", type=float, default=1e-12,
                        help="relative area tolerance for degenerate elements")
    parser.add_argument("--pivot-tol", type=float, default=1e-12,
                        help="relative pivot tolerance for singular systems")
    parser.add_argument("--progress", action="store_true",
                        help="show a progress bar over elements")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="errors only")
    return parser


def _configure_logging(verbose: bool, quiet: bool) -> None:
    level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")
    logger.setLevel(level)


def _error(message: str) -> None:
    print(f"error: {message}", file=sys.stderr)


def _remove_output(path: str) -> None:
    try:
        os.remove(path)
    except OSError as e:
        logger.warning("Could not remove incomplete output file %r: %s", path, e)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the CLI. Returns the exit status; argparse exits with status 2 on
    usage errors before any file is touched.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose, args.quiet)

    try:
        config = SolverConfig(
            degenerate_tol=args.degenerate_tol,
            pivot_tol=args.pivot_tol,
            show_progress=args.progress,
            float_format=args.float_format,
        )
    except ValueError as e:
        parser.print_usage(sys.stderr)
        _error(f"invalid option: {e}")
        return EXIT_USAGE

    # ------------------------------------------------------------------
    # Read input, open output: both before any computation
    # ------------------------------------------------------------------
    try:
        model = load_model(args.input)
    except OSError as e:
        _error(f"cannot read input file {args.input!r}: {e.strerror or e}")
        return EXIT_IO
    except (ParseError, ModelError) as e:
        _error(f"invalid input in {args.input!r}: {e}")
        return EXIT_INPUT

    try:
        out = open(args.output, "w", encoding="utf-8")
    except OSError as e:
        _error(f"cannot write output file {args.output!r}: {e.strerror or e}")
        return EXIT_IO

    with out:
        try:
            result = run_analysis(model, config)
        except (ModelError, DegenerateElementError, SingularSystemError) as e:
            failure = e
        else:
            failure = None
            write_results(out, result.displacements, result.von_mises, config.float_format)

    if failure is not None:
        # No results: drop the empty output file
        _remove_output(args.output)
        if isinstance(failure, ModelError):
            _error(f"invalid model: {failure}")
            return EXIT_INPUT
        if isinstance(failure, DegenerateElementError):
            _error(f"degenerate geometry: {failure}")
            return EXIT_GEOMETRY
        _error(f"cannot solve: {failure}")
        return EXIT_SINGULAR

    try:
        if args.csv_dir:
            os.makedirs(args.csv_dir, exist_ok=True)
            nodes_table(model.mesh, result.displacements).to_csv(
                os.path.join(args.csv_dir, "nodes.csv"), index=False)
            elements_table(model.elements, result.stresses).to_csv(
                os.path.join(args.csv_dir, "elements.csv"), index=False)
        if args.plot:
            from .viz import plot_von_mises
            plot_von_mises(model, result, args.plot, scale=args.scale)
    except (OSError, ValueError) as e:
        # matplotlib raises ValueError for an unsupported image format
        _error(f"cannot write side output: {e}")
        return EXIT_IO

    if not args.quiet:
        print(f"Solved {model.n_nodes} nodes, {len(model.elements)} elements")
        print(f"  max |u|       = {result.max_displacement:.6g}")
        print(f"  max von Mises = {result.max_von_mises:.6g}")
        print(f"Results written to: {args.output}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
