"""
Readers for the tutorial datasets.

Every dataset is a whitespace-delimited text file with a header row, shipped
in ``bayesreg/data``. The readers validate the columns each case study needs
and add the derived columns the models use.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional, Union

import numpy as np
import pandas as pd

from bayesreg.config import DATA_DIR

logger = logging.getLogger(__name__)


def read_table(
    name_or_path: Union[str, Path], dtype: Optional[dict] = None
) -> pd.DataFrame:
    """
    Read a whitespace-delimited table with a header row.

    Bare file names are looked up in ``DATA_DIR``; anything else is treated
    as a path. Parsing errors from pandas are not caught.
    """
    path = Path(name_or_path)
    if not path.is_absolute() and path.parent == Path("."):
        path = DATA_DIR / path
    if not path.exists():
        raise FileNotFoundError(f"No dataset at {path}")

    df = pd.read_csv(path, sep=r"\s+", dtype=dtype)
    logger.info(f"Read {len(df)} rows x {df.shape[1]} columns from {path.name}")
    return df


def require_columns(df: pd.DataFrame, columns: Iterable[str]) -> None:
    missing = [col for col in columns if col not in df.columns]
    if missing:
        raise ValueError(f"Dataset is missing required column(s): {missing}")


def add_log_column(
    df: pd.DataFrame, column: str, name: Optional[str] = None
) -> pd.DataFrame:
    """Return a copy of ``df`` with the natural log of ``column`` added."""
    require_columns(df, [column])
    values = df[column].astype(float)
    if (values <= 0).any():
        raise ValueError(
            f"Cannot take log of column {column!r}: it has non-positive values"
        )
    out = df.copy()
    out[name or f"log_{column}"] = np.log(values)
    return out


def read_meat(path: Union[str, Path] = "meat.txt") -> pd.DataFrame:
    """pH of meat measured at several hours after slaughter."""
    df = read_table(path, dtype={"time": "float", "pH": "float"})
    require_columns(df, ["time", "pH"])
    return add_log_column(df, "time")


def read_donner(path: Union[str, Path] = "donner.txt") -> pd.DataFrame:
    """
    Age, sex and survival of the adult members of the Donner party.

    Adds ``survived`` (1 = Survived, 0 = Died).
    """
    df = read_table(path)
    require_columns(df, ["age", "sex", "survival"])
    status = df["survival"].str.strip().str.lower()
    unknown = sorted(set(status) - {"survived", "died"})
    if unknown:
        raise ValueError(f"Unrecognised survival values: {unknown}")
    df["survived"] = (status == "survived").astype(int)
    df["age"] = df["age"].astype(float)
    return df


def read_incomplete_block(
    path: Union[str, Path] = "incomplete_block.txt",
) -> pd.DataFrame:
    """Balanced incomplete block experiment: each block sees three of seven treatments."""
    df = read_table(path, dtype={"block": "str", "treatment": "str"})
    require_columns(df, ["block", "treatment", "growth"])
    return df


def read_overdispersion(
    path: Union[str, Path] = "overdispersion.txt",
) -> pd.DataFrame:
    """
    Seed germination counts per plate for two seed varieties and two root
    extracts. The spread between plates is larger than binomial sampling
    alone allows for.
    """
    df = read_table(path, dtype={"plate": "str"})
    require_columns(df, ["plate", "seed", "extract", "germinated", "total"])
    if (df["germinated"] > df["total"]).any():
        raise ValueError("germinated cannot exceed total")
    df["proportion"] = df["germinated"] / df["total"]
    return df


def describe(df: pd.DataFrame, response: str) -> str:
    require_columns(df, [response])
    y = df[response]
    return (
        f"{len(df)} observations of {response!r}: "
        f"mean {y.mean():.3g}, sd {y.std():.3g}, range {y.min():.3g} to {y.max():.3g}"
    )
