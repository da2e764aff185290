"""Configuration settings for the simulated predator-prey occurrence world."""

# Calendar years covered by one run (inclusive); one raster per year and folder
YEAR_RANGE = (1980, 2100)

# Sub-folders of the ROMS directory holding the average spring conditions
RASTER_FOLDERS = {
    "sst": "sst_spring_avg",
    "chla_surface": "chl_surface",
    "mld": "ild_0.5C",
    "zoo": "zoo_200m"
}
RASTER_PATTERN = ".grd"

# Species A (prey): likes high zooplankton and medium temperatures
PREY_PARAMS = {
    "sst": {"fun": "dnorm", "mean": 15, "sd": 5},
    "zoo": {"fun": "logistic", "alpha": -6, "beta": 50}
}

# Species B (albacore): likes to eat species A, warmer temperatures and a shallow MLD
PREDATOR_PARAMS = {
    "sst": {"fun": "dnorm", "mean": 17, "sd": 5},
    "mld": {"fun": "dnorm", "mean": 50, "sd": 25},
    "spA": {"fun": "logistic", "alpha": -0.05, "beta": 0.5}
}

# Suitability to presence-absence conversion
PA_PARAMS = {
    "method": "probability",  # Options: "probability" or "threshold"
    "alpha": -0.05,
    "beta": 0.5
}

# Occurrence sampling parameters
SAMPLING_PARAMS = {
    "n_samples": 100,              # Samples taken each year
    "sample_prevalence": 0.5,      # Fraction of samples drawn from presence cells
    "detection_probability": 1.0,  # 1 = every presence is detected
    "error_probability": 0.0,      # 0 = no false labels
    "stratum_policy": "replace",   # Options: "replace", "underfill" or "error"
    "coord_precision": 1           # Decimals kept for lon/lat
}

# Average monthly biomass available to the CCS: 1.18x10^5 +/- 0.13x10^5 (se) mt
ABUNDANCE_PARAMS = {
    "mean": round(118000 / 140, 1),
    "sd": round(13000 / 140, 2)
}

# None draws fresh entropy on every run
RANDOM_SEED = None

# Where covariates are read for each sample: "coordinates" (rounded lon/lat,
# nearest cell) or "cell" (the sampled cell itself)
EXTRACT_AT = "coordinates"
