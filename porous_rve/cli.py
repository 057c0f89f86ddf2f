"""
Command line entry point.

    porous-rve --Lx 1 --Ly 1 --dx 0.05 --phi 0.3 --m 3 --seed 42
    porous-rve --config params.json --quad-mesh --open
    porous-rve                      # interactive prompts
"""

import argparse
import logging
from typing import Callable, Dict, List, Optional

from porous_rve import __version__
from porous_rve.bonds import METHODS
from porous_rve.config import (
    PARAMETER_PROMPTS,
    InvalidParameterError,
    RVEParameters,
    load_parameters,
    parameter_names,
)
from porous_rve.logging_config import setup_logging
from porous_rve.pipeline import generate_rve
from porous_rve.viewer import open_in_paraview

logger = logging.getLogger("porous_rve.cli")

EXIT_OK = 0
EXIT_WRITE_FAILED = 1
EXIT_INVALID = 2

InputFn = Callable[[str], str]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="porous-rve",
        description="2D nanoporous RVE generator (bond-based peridynamic pre-damage)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    params = parser.add_argument_group("domain parameters")
    params.add_argument("--Lx", type=float, help="Domain length in x")
    params.add_argument("--Ly", type=float, help="Domain length in y")
    params.add_argument("--dx", type=float, help="Grid spacing")
    params.add_argument("--phi", type=float, help="Porosity parameter (0..1, probability of bond break)")
    params.add_argument("--m", type=float, help="Horizon factor (delta = m*dx)")
    params.add_argument("--config", "-c", type=str, default=None,
                        help="JSON file with Lx, Ly, dx, phi, m (flags override it)")

    run = parser.add_argument_group("run options")
    run.add_argument("--out-dir", "-o", type=str, default="rve_output",
                     help="Output directory (default: rve_output)")
    run.add_argument("--seed", type=int, default=None,
                     help="Random seed for reproducible bond breaking")
    run.add_argument("--method", choices=METHODS, default="auto",
                     help="Neighbor search method")
    run.add_argument("--workers", type=int, default=1,
                     help="Threads for the exhaustive neighbor scan")
    run.add_argument("--quad-mesh", action="store_true",
                     help="Also write the quad mesh with cell-wise damage (VTK + XDMF)")
    run.add_argument("--open", action="store_true",
                     help="Open the point-cloud VTK in ParaView when done")

    log = parser.add_argument_group("logging")
    log.add_argument("--log-level", default="INFO",
                     choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    log.add_argument("--log-file", default=None)
    return parser


def _flag_values(args: argparse.Namespace) -> Dict[str, float]:
    return {name: getattr(args, name) for name in parameter_names()
            if getattr(args, name) is not None}


def parameters_from_args(args: argparse.Namespace) -> Optional[RVEParameters]:
    """
    Parameters from --config and/or flags; None when nothing was given
    (interactive mode).

    Raises:
        InvalidParameterError: If the given values are incomplete or malformed.
    """
    values: Dict[str, float] = {}
    if args.config:
        values.update(load_parameters(args.config).as_dict())
    values.update(_flag_values(args))

    if not values:
        return None
    return RVEParameters.from_mapping(values)


def prompt_parameters(input_fn: InputFn = input) -> RVEParameters:
    values = {}
    for name, prompt in PARAMETER_PROMPTS.items():
        values[name] = input_fn(prompt).strip()
    return RVEParameters.from_mapping(values)


def ask_yes_no(question: str, input_fn: InputFn = input) -> bool:
    return input_fn(f"{question} (y/n): ").strip().lower() == "y"


def run_once(params: RVEParameters, args: argparse.Namespace,
             input_fn: Optional[InputFn] = None) -> int:
    """
    One simulation: generate, write, optionally visualize.

    ``input_fn`` is only used in interactive mode, to ask about ParaView.
    """
    try:
        result = generate_rve(params, seed=args.seed, method=args.method,
                              workers=args.workers)
    except InvalidParameterError as e:
        logger.error(str(e))
        return EXIT_INVALID

    try:
        written = result.write(args.out_dir, quad_mesh=args.quad_mesh)
    except OSError as e:
        logger.error(f"Could not write results to {args.out_dir}: {e}")
        return EXIT_WRITE_FAILED

    if args.open or (input_fn is not None and ask_yes_no(
            "Open point-cloud VTK in ParaView now?", input_fn)):
        open_in_paraview(written["points"])

    logger.info("RVE generation finished.")
    return EXIT_OK


def interactive_loop(args: argparse.Namespace, input_fn: InputFn = input) -> int:
    print("\n===== 2D Nanoporous RVE Generator (bond-based damage) =====")
    status = EXIT_OK
    try:
        while True:
            try:
                params = prompt_parameters(input_fn)
            except InvalidParameterError as e:
                logger.error(str(e))
                status = EXIT_INVALID
            else:
                status = run_once(params, args, input_fn)

            print("\n========================================")
            if not ask_yes_no("Would you like to run another simulation?", input_fn):
                break
    except EOFError:
        pass
    return status


def main(argv: Optional[List[str]] = None, input_fn: InputFn = input) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.workers < 1:
        parser.error("--workers must be >= 1")
    if args.seed is not None and args.seed < 0:
        parser.error("--seed must be >= 0")

    try:
        setup_logging(level=getattr(logging, args.log_level), log_file=args.log_file)
    except OSError as e:
        parser.error(f"cannot open log file: {e}")

    try:
        params = parameters_from_args(args)
    except InvalidParameterError as e:
        logger.error(str(e))
        return EXIT_INVALID
    except OSError as e:
        logger.error(f"Cannot read parameter file: {e}")
        return EXIT_INVALID

    if params is None:
        return interactive_loop(args, input_fn)
    return run_once(params, args)


if __name__ == "__main__":
    raise SystemExit(main())
