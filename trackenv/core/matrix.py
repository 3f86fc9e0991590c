"""
Dated value matrix

Samples x layers table of environmental values, with one acquisition date
per layer. Built either from a precomputed table or by sampling a raster
stack; the temporal logic only ever sees this one shape.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from trackenv.core.exceptions import ValidationError
from trackenv.core.validation import as_dates, check_length


def is_tabular(source: Any) -> bool:
    """True for sources already holding one row per sample"""
    return isinstance(source, (pd.DataFrame, np.ndarray))


@dataclass(frozen=True)
class DatedValueMatrix:
    """
    Read-only (samples x layers) value matrix with layer dates

    Attributes:
        values: float64 array of shape (n_samples, n_layers), NaN = missing
        dates: ``datetime64[D]`` array of shape (n_layers,)
        names: Optional layer names

    Examples:
        >>> table = pd.DataFrame({"a": [1.0, np.nan], "b": [2.0, 3.0]})
        >>> matrix = DatedValueMatrix.from_table(
        ...     table, pd.to_datetime(["2024-01-01", "2024-01-17"])
        ... )
        >>> matrix.shape
        (2, 2)
    """

    values: NDArray
    dates: NDArray
    names: list[str | None] = field(default_factory=list)

    def __post_init__(self):
        values = np.array(self.values, dtype=np.float64)
        if values.ndim != 2:
            raise ValidationError('"env_data" should be two-dimensional')
        check_length(self.dates, values.shape[1], "env_dates", "env_data")
        values.flags.writeable = False
        object.__setattr__(self, "values", values)
        if not self.names:
            object.__setattr__(self, "names", [None] * values.shape[1])

    @classmethod
    def from_table(cls, table: Any, dates: Any) -> "DatedValueMatrix":
        """
        Build from a DataFrame or 2-D array whose columns are layers

        Non-numeric cells are treated as missing.

        Raises:
            ValidationError: If dates are invalid or do not match the columns
        """
        dates = as_dates(dates, "env_dates")
        if isinstance(table, pd.DataFrame):
            names = [str(c) for c in table.columns]
            values = table.apply(pd.to_numeric, errors="coerce").to_numpy(dtype=np.float64)
        else:
            array = np.asarray(table)
            if array.ndim != 2:
                raise ValidationError('"env_data" should be two-dimensional')
            names = []
            if array.dtype.kind in "biuf":
                values = array.astype(np.float64)
            else:
                values = pd.DataFrame(array).apply(pd.to_numeric, errors="coerce").to_numpy(
                    dtype=np.float64
                )
        return cls(values=values, dates=dates, names=names)

    @classmethod
    def from_raster(
        cls,
        stack,
        dates: Any,
        coords: NDArray,
        radius: float | None = None,
        reducer: Callable | None = None,
    ) -> "DatedValueMatrix":
        """
        Build by sampling a RasterStack at sample coordinates

        Args:
            stack: RasterStack (one layer per date)
            dates: Layer acquisition dates
            coords: Array of shape (n, 2) in the stack CRS
            radius: Optional smoothing radius in CRS units
            reducer: Optional smoothing reducer

        Raises:
            ValidationError: If dates are invalid or do not match the layers
            ExtractionError: If the raster cannot be read
        """
        from trackenv.io.sampling import extract

        dates = as_dates(dates, "env_dates")
        check_length(dates, stack.count, "env_dates", "env_data")
        values = extract(coords, stack, radius=radius, reducer=reducer)
        return cls(values=values, dates=dates, names=stack.names)

    @property
    def shape(self) -> tuple[int, int]:
        return self.values.shape

    @property
    def n_samples(self) -> int:
        return self.values.shape[0]

    @property
    def n_layers(self) -> int:
        return self.values.shape[1]

    def row(self, index: int) -> NDArray:
        """Layer values for one sample"""
        return self.values[index]

    def select_layers(self, mask: NDArray) -> "DatedValueMatrix":
        """Keep the layers flagged in a boolean mask"""
        mask = np.asarray(mask, dtype=bool)
        return DatedValueMatrix(
            values=self.values[:, mask],
            dates=self.dates[mask],
            names=[n for n, keep in zip(self.names, mask) if keep],
        )

    def to_pandas(self) -> pd.DataFrame:
        """Values as a DataFrame, one column per layer date"""
        return pd.DataFrame(self.values, columns=pd.DatetimeIndex(self.dates))

    def __repr__(self) -> str:
        return f"<DatedValueMatrix: {self.n_samples} samples x {self.n_layers} layers>"
