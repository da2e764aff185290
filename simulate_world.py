"""Main module for the simulated predator-prey occurrence world."""

import argparse
import logging
import os

from config import (
    YEAR_RANGE, RASTER_FOLDERS, RASTER_PATTERN, PREY_PARAMS, PREDATOR_PARAMS,
    PA_PARAMS, SAMPLING_PARAMS, ABUNDANCE_PARAMS, RANDOM_SEED, EXTRACT_AT
)
from data_processing.environment_loader import EnvironmentLoader
from data_processing.occurrence_sampler import OccurrenceSampler
from data_processing.presence_absence import PresenceAbsenceConverter
from data_processing.trophic_coupling import TrophicCoupling
from data_processing.world_simulator import WorldSimulator

logger = logging.getLogger(__name__)


def build_simulator(environment, seed=RANDOM_SEED, prey_params=None, predator_params=None,
                    pa_params=None, sampling_params=None, abundance_params=None,
                    extract_at=EXTRACT_AT):
    """
    Wire the pipeline components together.

    Args:
        environment: Environment source (EnvironmentLoader or SnapshotSeries)
        seed: Seed for every random draw
        prey_params, predator_params, pa_params, sampling_params, abundance_params:
            Overrides of the corresponding config dictionaries
        extract_at: "coordinates" or "cell", where covariates are read

    Returns:
        WorldSimulator ready to run
    """
    coupling = TrophicCoupling(prey_params or PREY_PARAMS, predator_params or PREDATOR_PARAMS)
    converter = PresenceAbsenceConverter(**(pa_params or PA_PARAMS))
    sampler = OccurrenceSampler(**(sampling_params or SAMPLING_PARAMS))
    return WorldSimulator(
        environment,
        coupling,
        converter,
        sampler,
        abundance_params or ABUNDANCE_PARAMS,
        seed=seed,
        extract_at=extract_at
    )


def run_simulation(directory, seed=RANDOM_SEED, years=None, pattern=RASTER_PATTERN,
                   sampling_params=None, extract_at=EXTRACT_AT):
    """
    Run the complete simulation over the raster files in a directory.

    Args:
        directory: Directory holding the ROMS layer sub-folders
        seed: Seed for every random draw
        years: Calendar years to simulate (defaults to YEAR_RANGE)
        pattern: File extension of the raster files
        sampling_params: Overrides of SAMPLING_PARAMS
        extract_at: "coordinates" or "cell", where covariates are read

    Returns:
        DataFrame with one row per sampled point and year
    """
    try:
        if years is None:
            years = range(YEAR_RANGE[0], YEAR_RANGE[1] + 1)

        logger.info("=== Starting Simulated World ===")
        logger.info(f"ROMS directory: {directory}")

        environment = EnvironmentLoader(directory, RASTER_FOLDERS, years, pattern=pattern)
        simulator = build_simulator(
            environment, seed=seed, sampling_params=sampling_params, extract_at=extract_at
        )
        output = simulator.run()

        logger.info("=== Simulation completed successfully ===")
        return output

    except Exception as e:
        logger.error(f"Error in simulation: {str(e)}")
        raise


def save_output(output, output_file):
    """Write the output table as .xlsx or .csv depending on the extension."""
    directory = os.path.dirname(output_file)
    if directory:
        os.makedirs(directory, exist_ok=True)

    if output_file.endswith('.xlsx'):
        output.to_excel(output_file, index=False)
    else:
        output.to_csv(output_file, index=False)
    logger.info(f"Results saved to {output_file}")


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler("simulation.log"),
            logging.StreamHandler()
        ],
        force=True
    )

    parser = argparse.ArgumentParser(description="Simulated predator-prey occurrence world")
    parser.add_argument("--dir", required=True, help="Directory with the ROMS layer folders")
    parser.add_argument("--output", default="simulated_world.csv", help="Output file (.csv or .xlsx)")
    parser.add_argument("--seed", type=int, default=RANDOM_SEED, help="Random seed")
    parser.add_argument("--start-year", type=int, default=YEAR_RANGE[0])
    parser.add_argument("--end-year", type=int, default=YEAR_RANGE[1])
    parser.add_argument("--pattern", default=RASTER_PATTERN, help="Raster file extension")
    parser.add_argument("--n-samples", type=int, default=SAMPLING_PARAMS["n_samples"])
    parser.add_argument("--prevalence", type=float, default=SAMPLING_PARAMS["sample_prevalence"])
    parser.add_argument(
        "--stratum-policy",
        choices=["replace", "underfill", "error"],
        default=SAMPLING_PARAMS["stratum_policy"],
        help="Fallback when a presence or absence stratum is too small"
    )

    parser.add_argument(
        "--extract-at",
        choices=["coordinates", "cell"],
        default=EXTRACT_AT,
        help="Read covariates at the rounded coordinates or at the sampled cell"
    )

    args = parser.parse_args()

    sampling_params = dict(SAMPLING_PARAMS)
    sampling_params.update({
        "n_samples": args.n_samples,
        "sample_prevalence": args.prevalence,
        "stratum_policy": args.stratum_policy
    })

    output = run_simulation(
        args.dir,
        seed=args.seed,
        years=range(args.start_year, args.end_year + 1),
        pattern=args.pattern,
        sampling_params=sampling_params,
        extract_at=args.extract_at
    )
    save_output(output, args.output)
