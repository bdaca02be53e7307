"""
Inter-event time loading utilities for Quake Weibull.

Supports:
- CSV files on disk (relative to a data directory, or absolute)
- CSV resources fetched by URL (http/https, read directly by pandas)
- Event catalogues with a time column (gaps derived from successive events)

Example CSV format for gap data:
    gap
    12.5
    3.1
    40.2
    ...

Example CSV format for an event catalogue:
    time,magnitude
    0.0,6.1
    12.5,6.4
    15.6,6.0
    ...
"""
import numpy as np
import pandas as pd
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union
import warnings


def _is_url(source: str) -> bool:
    return str(source).lower().startswith(('http://', 'https://'))


def validate_gaps(x) -> np.ndarray:
    """Check that observations are a 1-D array of finite, strictly positive values.

    Args:
        x: array-like of observed gaps

    Returns:
        float64 copy of the observations

    Raises:
        ValueError: if the array is not 1-D, or has non-finite or
            non-positive entries (outside the Weibull support).
    """
    arr = np.array(x, dtype=np.float64)
    if arr.ndim != 1:
        raise ValueError(f"Observations must be 1-D, got shape {arr.shape}")
    if not np.all(np.isfinite(arr)):
        n_bad = int(np.sum(~np.isfinite(arr)))
        raise ValueError(f"Observations contain {n_bad} missing or non-finite values")
    if np.any(arr <= 0):
        n_bad = int(np.sum(arr <= 0))
        raise ValueError(
            f"Observations must be strictly positive (Weibull support), "
            f"found {n_bad} values <= 0"
        )
    return arr


@dataclass(frozen=True, eq=False)
class GapData:
    """Observed inter-event times, immutable once loaded."""
    x: np.ndarray
    source: str = '<memory>'
    n: int = field(init=False)

    def __post_init__(self):
        arr = validate_gaps(self.x)
        arr.setflags(write=False)
        object.__setattr__(self, 'x', arr)
        object.__setattr__(self, 'n', int(arr.size))

    def as_model_data(self) -> dict:
        """Data block for the model: {'n': count, 'x': observations}."""
        return {'n': self.n, 'x': self.x}


class GapDataLoader:
    """Load and validate earthquake inter-event times."""

    def __init__(self, data_dir: str = 'data', verbose: bool = True):
        """
        Args:
            data_dir: Directory that relative file names are resolved against
            verbose: Print a short report after each load
        """
        self.data_dir = Path(data_dir)
        self.verbose = verbose

    def _resolve(self, source: Union[str, Path]) -> str:
        if _is_url(str(source)):
            return str(source)

        filepath = Path(source)
        if not filepath.is_absolute():
            filepath = self.data_dir / filepath
        if not filepath.exists():
            raise FileNotFoundError(f"Gap data file not found: {filepath}")
        return str(filepath)

    def _read(self, source: Union[str, Path], delimiter: str) -> pd.DataFrame:
        location = self._resolve(source)
        if self.verbose and _is_url(location):
            print(f"[Data] Fetching {location}")
        _engine = 'python' if len(delimiter) > 1 else 'c'
        return pd.read_csv(location, sep=delimiter, engine=_engine)

    def load_csv(self, source: Union[str, Path],
                 column: Optional[str] = None,
                 delimiter: str = ',') -> GapData:
        """Load observed gaps from a CSV file or URL.

        Args:
            source: Path (relative to data_dir, or absolute) or http(s) URL.
            column: Column holding the gaps. If None, the first numeric
                column is used.
            delimiter: Column delimiter (',', '\\t', r'\\s+', ...).

        Returns:
            GapData with the validated observations.

        Raises:
            FileNotFoundError: local file does not exist.
            ValueError: column missing, no numeric column, or invalid values.
        """
        df = self._read(source, delimiter)

        if column is None:
            numeric = df.select_dtypes(include='number').columns
            if len(numeric) == 0:
                raise ValueError(f"No numeric column found in {source}")
            column = numeric[0]
        elif column not in df.columns:
            raise ValueError(
                f"Column '{column}' not found in {source} "
                f"(available: {list(df.columns)})"
            )

        data = GapData(df[column].to_numpy(dtype=np.float64), source=str(source))
        self._report(data, column)
        return data

    def load_event_times(self, source: Union[str, Path],
                         time_col: str = 'time',
                         delimiter: str = ',') -> GapData:
        """Derive inter-event gaps from a catalogue of event times.

        Times are sorted first. Zero gaps (events sharing a timestamp) fall
        outside the Weibull support and are dropped with a warning.
        """
        df = self._read(source, delimiter)
        if time_col not in df.columns:
            raise ValueError(f"Time column '{time_col}' not found in {source}")

        times = np.sort(df[time_col].dropna().to_numpy(dtype=np.float64))
        gaps = np.diff(times)

        n_dropped = int(np.sum(gaps <= 0))
        if n_dropped:
            warnings.warn(f"Dropped {n_dropped} non-positive gaps (coincident events)")
            gaps = gaps[gaps > 0]

        data = GapData(gaps, source=str(source))
        self._report(data, f"diff({time_col})")
        return data

    def _report(self, data: GapData, column: str):
        if not self.verbose:
            return
        print(f"[OK] Loaded {data.n} gaps from '{column}' ({data.source})")
        if data.n:
            print(f"  Range: {data.x.min():.3f} - {data.x.max():.3f}")
            print(f"  Mean: {data.x.mean():.3f}, median: {np.median(data.x):.3f}")


def generate_synthetic_gaps(k: float = 1.0, lam: float = 10.0,
                            n: int = 5000,
                            seed: Optional[int] = None) -> np.ndarray:
    """Draw n gaps from Weibull(k, lam) with numpy's generator.

    numpy's ``weibull`` draws the unit-scale variant, so the result is
    multiplied by ``lam``.
    """
    if k <= 0 or lam <= 0:
        raise ValueError(f"k and lam must be positive, got k={k}, lam={lam}")
    rng = np.random.default_rng(seed)
    return lam * rng.weibull(k, size=n)


def create_sample_gap_csv(path: Union[str, Path],
                          k: float = 0.9,
                          lam: float = 17.0,
                          n: int = 200,
                          column: str = 'gap',
                          seed: Optional[int] = 0) -> Path:
    """Write a CSV of synthetic gaps for demos and tests.

    Returns:
        Path of the written file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    gaps = generate_synthetic_gaps(k, lam, n, seed)
    pd.DataFrame({column: gaps}).to_csv(path, index=False)
    return path
