import argparse
import sys
from pathlib import Path

from slidem import config
from slidem.processor.logging_utils import setup_logging
from slidem.processor.pipeline import run


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments for the SLIDEM processor.

    Positional arguments name the input table and the products file; options
    control probe geometry, the composition model and post-processing.
    """
    parser = argparse.ArgumentParser(
        prog="python -m slidem.processor",
        description=(
            "Derive ion effective mass, ion density and along-track ion drift "
            "from Swarm faceplate current and Langmuir probe data for one day."
        ),
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument("input", help="Time-aligned input table (.csv, .parquet or .npz)")
    parser.add_argument("output", help="Products file (.npz, .csv or .parquet)")

    parser.add_argument(
        "--oml-params",
        default=None,
        help=(
            "Modified OML parameter file; defaults to "
            f"{config.MODIFIED_OML_CONFIG_FILE} when present"
        ),
    )
    parser.add_argument(
        "--no-faceplate-correction",
        action="store_true",
        default=False,
        help="Use the geometric faceplate area",
    )
    parser.add_argument(
        "--no-probe-correction",
        action="store_true",
        default=False,
        help="Use the nominal spherical probe radius",
    )

    parser.add_argument(
        "--satellite", default=None, help="Satellite letter (A, B or C), needed for non-blended Te"
    )
    parser.add_argument(
        "--non-blended-te",
        action="store_true",
        default=False,
        help="Select and calibrate Te from the best probe",
    )
    parser.add_argument(
        "--non-blended-vs",
        action="store_true",
        default=False,
        help="Select the spacecraft potential from the best probe",
    )

    parser.add_argument(
        "--dk-date",
        default=None,
        help="Date (YYYY-MM-DD) for the Danilov-Yaichnikov effective mass model",
    )
    parser.add_argument(
        "--f107-file", default=None, help=f"F10.7 table; defaults to {config.F107_FILE}"
    )

    parser.add_argument(
        "--no-post-process",
        action="store_true",
        default=False,
        help="Skip the ion drift offset removal",
    )
    parser.add_argument(
        "--no-refresh",
        action="store_true",
        default=False,
        help="Do not re-derive mass and density after offset removal",
    )
    parser.add_argument(
        "--fit-flag-mask",
        type=int,
        default=config.ION_DRIFT_POST_CALIBRATION_FLAG_MASK,
        help="Drift flag bits that exclude a sample from the offset fit",
    )
    parser.add_argument(
        "--fit-log",
        action="store_true",
        default=False,
        help=f"Write the offset fit log next to the output ({config.FIT_LOG_SUFFIX})",
    )

    parser.add_argument(
        "--progress", action="store_true", default=False, help="Show a progress bar"
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Enable verbose output",
    )

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_arguments(argv)
    setup_logging(args.verbose, label=f"SLIDEM {Path(args.input).stem}")
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
