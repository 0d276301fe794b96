"""
On-disk cache of fitted models, keyed by model name.
"""

from pathlib import Path

import arviz as az
import pandas as pd


class ModelStore:
    """Save and load fitted models as NetCDF files under one directory."""

    def __init__(self, models_dir: Path):
        self.models_dir = Path(models_dir)

    def path_for(self, name: str) -> Path:
        return self.models_dir / f"{name}.nc"

    def exists(self, name: str) -> bool:
        return self.path_for(name).exists()

    def save(self, name: str, idata: az.InferenceData) -> Path:
        path = self.path_for(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        idata.to_netcdf(str(path))
        print(f"  Saved {name} to {path}")
        return path

    def load(self, name: str) -> az.InferenceData:
        """
        Load a fitted model.

        Raises
        ------
        FileNotFoundError
            If the model was never fitted and saved
        """
        path = self.path_for(name)
        if not path.exists():
            raise FileNotFoundError(f"No fitted model artifact for '{name}' at {path}")
        return az.from_netcdf(str(path))

    def fit_or_load(self, spec, data: pd.DataFrame, sampler, refit: bool = False) -> az.InferenceData:
        """Return the cached fit for spec, fitting and saving it first if needed."""
        if self.exists(spec.name) and not refit:
            print(f"Loading cached fit for {spec.name}")
            return self.load(spec.name)
        idata = sampler.fit(spec, data)
        self.save(spec.name, idata)
        return idata
