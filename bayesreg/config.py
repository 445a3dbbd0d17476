"""
Sampler settings and shared constants.

Defaults can be overridden with ``BAYESREG_*`` environment variables, which
is handy when rendering the notebook on a machine with fewer cores.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DATA_DIR: Path = Path(
    os.getenv("BAYESREG_DATA_DIR", Path(__file__).resolve().parent / "data")
)

# Convergence thresholds
RHAT_THRESHOLD = 1.01
ESS_THRESHOLD = 400
DIVERGENCE_RATE_THRESHOLD = 0.0

NUTS_SAMPLERS = ("pymc", "nutpie", "numpyro", "blackjax")


@dataclass
class SamplerConfig:
    draws: int = 1000
    tune: int = 1000
    chains: int = 4
    cores: int = 4
    target_accept: float = 0.9
    random_seed: Optional[int] = None
    nuts_sampler: str = "pymc"

    def __post_init__(self) -> None:
        if self.draws < 1:
            raise ValueError(f"draws must be >= 1. Got {self.draws}")
        if self.tune < 0:
            raise ValueError(f"tune must be >= 0. Got {self.tune}")
        if self.chains < 1:
            raise ValueError(f"chains must be >= 1. Got {self.chains}")
        if self.cores < 1:
            raise ValueError(f"cores must be >= 1. Got {self.cores}")
        if not (0.0 < self.target_accept < 1.0):
            raise ValueError(
                f"target_accept must be in (0, 1). Got {self.target_accept}"
            )
        if self.nuts_sampler not in NUTS_SAMPLERS:
            raise ValueError(
                f"nuts_sampler must be one of {NUTS_SAMPLERS}. Got {self.nuts_sampler!r}"
            )

    @classmethod
    def from_env(cls, **overrides) -> "SamplerConfig":
        values = {}
        for field, var, cast in (
            ("draws", "BAYESREG_DRAWS", int),
            ("tune", "BAYESREG_TUNE", int),
            ("chains", "BAYESREG_CHAINS", int),
            ("cores", "BAYESREG_CORES", int),
            ("random_seed", "BAYESREG_SEED", int),
            ("nuts_sampler", "BAYESREG_SAMPLER", str),
        ):
            raw = os.getenv(var)
            if raw is not None and raw != "":
                values[field] = cast(raw)
        values.update(overrides)
        return cls(**values)

    def sample_kwargs(self) -> dict:
        return {
            "draws": self.draws,
            "tune": self.tune,
            "chains": self.chains,
            "cores": self.cores,
            "target_accept": self.target_accept,
            "random_seed": self.random_seed,
            "nuts_sampler": self.nuts_sampler,
        }
