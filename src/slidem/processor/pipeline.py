import argparse
import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from slidem import config
from slidem.physics.composition import dk_mass_model, load_f107_adjusted
from slidem.physics.oml import (
    FaceplateParams,
    ModifiedOMLConfigError,
    ProbeParams,
    load_modified_oml_params,
)
from slidem.post_process.fitlog import write_fit_log
from slidem.post_process.offsets import PostProcessReport, remove_drift_offsets
from slidem.post_process.regions import DEFAULT_FIT_REGIONS, FitRegion
from slidem.processor.io import load_day_inputs, save_products
from slidem.processor.results import SlidemProducts
from slidem.products import MassModel, OMLSettings, calculate_products
from slidem.samples import DayInputs

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ProcessingSettings:
    """
    Runtime options for one day.

    Attributes:
        oml: Probe geometry corrections.
        post_process_drift: Remove drift offsets after the forward pass.
        refresh_mass_and_density: Re-derive mass and density with the
            corrected drift.
        fit_flag_mask: Drift flag bits excluding a sample from the offset fit.
        regions: Offset calibration regions.
        mass_model: Model effective mass per sample; None uses the sample seed.
        fit_log_path: Where to write the fit log, if anywhere.
        show_progress: Display a progress bar over samples.
    """

    oml: OMLSettings = OMLSettings()
    post_process_drift: bool = config.POST_PROCESS_ION_DRIFT
    refresh_mass_and_density: bool = config.POST_PROCESS_ION_EFFECTIVE_MASS_AND_DENSITY
    fit_flag_mask: int = config.ION_DRIFT_POST_CALIBRATION_FLAG_MASK
    regions: tuple[FitRegion, ...] = DEFAULT_FIT_REGIONS
    mass_model: MassModel | None = None
    fit_log_path: Path | None = None
    show_progress: bool = False


@dataclass()
class DayResult:
    products: SlidemProducts
    report: PostProcessReport | None = None


def process_day(
    inputs: DayInputs, settings: ProcessingSettings = ProcessingSettings()
) -> DayResult:
    """
    Run the forward retrieval, then the drift offset removal when enabled.

    Args:
        inputs: One day of time-aligned inputs.
        settings: Runtime options.

    Returns:
        Products and, if post-processing ran, its report.
    """
    logger.info(f"Processing {len(inputs)} samples...")
    products = calculate_products(
        inputs,
        oml=settings.oml,
        mass_model=settings.mass_model,
        show_progress=settings.show_progress,
    )
    logger.info(
        f"Ion drift coverage: {100.0 * products.converged_fraction:.1f}% of samples converged "
        f"({products.converged_count}/{len(products)})"
    )

    report = None
    if settings.post_process_drift:
        logger.info("Post-processing ion drift...")
        report = remove_drift_offsets(
            inputs,
            products,
            regions=settings.regions,
            flag_mask=settings.fit_flag_mask,
            refresh=settings.refresh_mass_and_density,
            oml=settings.oml,
        )
        if settings.fit_log_path is not None:
            write_fit_log(settings.fit_log_path, settings.regions, report.attempts)

    return DayResult(products=products, report=report)


def resolve_oml_settings(args: argparse.Namespace) -> OMLSettings:
    """
    Geometry settings from the CLI options.

    An explicit parameter file must be readable. Without one, the default file
    is used when present, otherwise the nominal geometry.
    """
    if args.oml_params is not None:
        fp_params, probe_params = load_modified_oml_params(args.oml_params)
    else:
        try:
            fp_params, probe_params = load_modified_oml_params()
        except ModifiedOMLConfigError as exc:
            logger.warning(f"{exc}; using nominal probe geometry")
            fp_params, probe_params = FaceplateParams(), ProbeParams()
    return OMLSettings(
        fp_params=fp_params,
        probe_params=probe_params,
        faceplate_correction=not args.no_faceplate_correction,
        probe_correction=not args.no_probe_correction,
    )


def resolve_mass_model(args: argparse.Namespace) -> MassModel | None:
    if args.dk_date is None:
        return None
    day = date.fromisoformat(args.dk_date)
    f107 = load_f107_adjusted(day, args.f107_file)
    logger.info(f"Using Danilov-Yaichnikov composition with F10.7 = {f107:.1f}")
    return dk_mass_model(f107, day)


def run(args: argparse.Namespace) -> int:
    """Entry point for CLI."""
    try:
        inputs = load_day_inputs(
            args.input,
            satellite=args.satellite,
            blended_te=not args.non_blended_te,
            blended_vs=not args.non_blended_vs,
        )
        oml = resolve_oml_settings(args)
        mass_model = resolve_mass_model(args)
    except (FileNotFoundError, KeyError, ValueError, ModifiedOMLConfigError) as e:
        logger.error(f"Failed to prepare inputs: {e}")
        return 1

    if len(inputs) == 0:
        logger.warning("Input table is empty. Exiting.")
        return 1

    output = Path(args.output)
    fit_log_path = None
    if args.fit_log:
        fit_log_path = output.with_name(output.name + config.FIT_LOG_SUFFIX)

    settings = ProcessingSettings(
        oml=oml,
        post_process_drift=not args.no_post_process,
        refresh_mass_and_density=not args.no_refresh,
        fit_flag_mask=args.fit_flag_mask,
        mass_model=mass_model,
        fit_log_path=fit_log_path,
        show_progress=args.progress,
    )
    result = process_day(inputs, settings)
    save_products(output, result.products)
    return 0


__all__ = ["DayResult", "ProcessingSettings", "process_day", "run"]
