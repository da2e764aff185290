"""Module running the yearly simulation and assembling the occurrence table."""

import logging

import numpy as np
import pandas as pd
from tqdm import tqdm

from data_processing.covariate_extractor import CovariateExtractor
from utils.helpers import make_generators

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

OUTPUT_COLUMNS = [
    "lon", "lat", "year", "pres", "suitability",
    "sst", "zoo_200", "chla_surface", "mld", "abundance"
]

# "coordinates" reads covariates at the rounded lon/lat, "cell" at the sampled row/col
EXTRACTION_MODES = ["coordinates", "cell"]


class YearResult:
    """Rows produced by one year, before they are placed in the output table."""

    def __init__(self, year, rows, prevalence, notes):
        self.year = year
        self.rows = rows
        self.prevalence = prevalence
        self.notes = notes


def add_abundance(table, mean, sd, rng):
    """
    Apportion regional biomass to presence rows by local suitability.

    One Normal(mean, sd) draw per presence row, multiplied by the row's
    suitability; absence rows get 0.

    Args:
        table: DataFrame with "pres" and "suitability" columns
        mean: Mean biomass per sample
        sd: Standard deviation of the biomass
        rng: numpy.random.Generator

    Returns:
        Copy of the table with an "abundance" column
    """
    table = table.copy()
    presence = (table["pres"] == 1).to_numpy()
    abundance = np.zeros(len(table))
    abundance[presence] = rng.normal(mean, sd, int(presence.sum())) * table["suitability"].to_numpy()[presence]
    table["abundance"] = abundance
    return table


class WorldSimulator:
    """Class for simulating the predator occurrence dataset year by year."""

    def __init__(self, environment, coupling, converter, sampler, abundance_params,
                 seed=None, pa_rng=None, sampling_rng=None, abundance_rng=None,
                 extract_at="coordinates"):
        """
        Initialize the simulator.

        Args:
            environment: Source with a `years` list and `load_snapshot(index)`
            coupling: TrophicCoupling for prey and predator suitability
            converter: PresenceAbsenceConverter
            sampler: OccurrenceSampler
            abundance_params: Dictionary with "mean" and "sd" of the biomass draw
            seed: Seed for the generators that are not passed explicitly
            pa_rng, sampling_rng, abundance_rng: Optional numpy.random.Generator
                for the presence-absence, sampling and abundance draws
            extract_at: Where covariates are read, one of EXTRACTION_MODES; with
                "coordinates" a rounded point can fall in a neighbouring cell
        """
        if extract_at not in EXTRACTION_MODES:
            raise ValueError(f"extract_at must be one of {EXTRACTION_MODES}")

        self.environment = environment
        self.coupling = coupling
        self.converter = converter
        self.sampler = sampler
        self.abundance_params = abundance_params
        self.extract_at = extract_at

        default_pa, default_sampling, default_abundance = make_generators(seed, 3)
        self.pa_rng = pa_rng if pa_rng is not None else default_pa
        self.sampling_rng = sampling_rng if sampling_rng is not None else default_sampling
        self.abundance_rng = abundance_rng if abundance_rng is not None else default_abundance

    @property
    def years(self):
        return list(self.environment.years)

    def row_block(self, year_index):
        """Pre-reserved (start, end) row range of a year; end is exclusive."""
        start = year_index * self.sampler.n_samples
        return start, start + self.sampler.n_samples

    def simulate_year(self, year_index):
        """
        Simulate one year.

        Args:
            year_index: Position of the year in the environment source

        Returns:
            YearResult with the year's output rows (without abundance)
        """
        snapshot = self.environment.load_snapshot(year_index)
        year = snapshot.year
        logger.info(f"Creating environmental simulation for Year {year}")

        _, predator = self.coupling.compute(snapshot)
        pa_field, _ = self.converter.convert(predator, self.pa_rng)
        samples = self.sampler.sample(pa_field, self.sampling_rng)

        extractor = CovariateExtractor({
            "suitability": predator,
            "sst": snapshot.sst,
            "zoo_200": snapshot.zoo,
            "chla_surface": snapshot.chla_surface,
            "mld": snapshot.mld
        })
        if self.extract_at == "cell":
            covariates = extractor.extract_variables_for_cells(samples["row"], samples["col"])
        else:
            covariates = extractor.extract_variables_for_points(samples["x"], samples["y"])

        rows = pd.DataFrame({
            "lon": samples["x"].to_numpy(),
            "lat": samples["y"].to_numpy(),
            "year": year,
            "pres": samples["Real"].to_numpy()
        })
        rows = pd.concat([rows, covariates], axis=1)

        valid = np.isfinite(pa_field.values)
        prevalence = float(np.nanmean(pa_field.values)) if valid.any() else float("nan")
        return YearResult(year, rows, prevalence, samples.attrs.get("sampling_notes", []))

    def run(self):
        """
        Run every year and assemble the output table.

        Returns:
            DataFrame with columns lon, lat, year, pres, suitability, sst,
            zoo_200, chla_surface, mld and abundance; one block of
            n_samples rows per year
        """
        years = self.years
        n_rows = len(years) * self.sampler.n_samples
        logger.info(f"Simulating {len(years)} years ({n_rows} rows)")

        table = pd.DataFrame(np.nan, index=pd.RangeIndex(n_rows), columns=OUTPUT_COLUMNS[:-1])
        notes = {}
        prevalence = {}

        for year_index in tqdm(range(len(years)), desc="Simulating years", dynamic_ncols=True):
            try:
                result = self.simulate_year(year_index)
            except Exception as e:
                logger.error(f"Error simulating year {years[year_index]}: {str(e)}")
                raise

            start, end = self.row_block(year_index)
            if len(result.rows) != end - start:
                raise ValueError(
                    f"Year {result.year} produced {len(result.rows)} rows, expected {end - start}"
                )
            table.iloc[start:end] = result.rows[table.columns].to_numpy()
            prevalence[result.year] = result.prevalence
            if result.notes:
                notes[result.year] = result.notes

        table = table.astype({"year": int, "pres": int})
        table = add_abundance(
            table,
            self.abundance_params["mean"],
            self.abundance_params["sd"],
            self.abundance_rng
        )
        table.attrs["sampling_notes"] = notes
        table.attrs["prevalence"] = prevalence

        logger.info(f"Simulation complete: {len(table)} rows, {int(table['pres'].sum())} presences")
        return table
