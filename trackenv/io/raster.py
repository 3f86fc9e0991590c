"""
Raster stacks of dated environmental layers

A RasterStack is an ordered sequence of 2-D layers sharing one coordinate
reference system. Layers come from rasterio datasets (one layer per band)
or from an in-memory xarray cube. Values are read as float64 with NaN for
nodata.
"""

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd
import rasterio
import xarray as xr
from numpy.typing import NDArray
from rasterio.crs import CRS
from rasterio.errors import RasterioIOError
from rasterio.io import DatasetReader
from rasterio.transform import Affine
from rasterio.windows import Window

from trackenv.core.exceptions import ExtractionError, ValidationError

logger = logging.getLogger(__name__)


class BandLayer:
    """Single band of an open rasterio dataset"""

    def __init__(self, dataset: Any, band: int, name: str | None = None):
        self.dataset = dataset
        self.band = band
        self.name = name
        self.transform = dataset.transform
        self.height = dataset.height
        self.width = dataset.width

    def read(self, window: Window) -> NDArray:
        """Read a window as float64, nodata as NaN"""
        try:
            data = self.dataset.read(self.band, window=window, masked=True)
        except RasterioIOError as e:
            raise ExtractionError(
                f"Failed to read band {self.band} of {self.dataset.name}: {e}"
            ) from e
        return data.astype(np.float64).filled(np.nan)


class ArrayLayer:
    """In-memory (or lazily loaded) 2-D array with an affine transform"""

    def __init__(
        self,
        data: Any,
        transform: Affine,
        name: str | None = None,
        nodata: float | None = None,
    ):
        self.data = data
        self.transform = transform
        self.name = name
        self.nodata = nodata
        self.height, self.width = data.shape

    def read(self, window: Window) -> NDArray:
        """Read a window as float64, nodata as NaN"""
        row, col = int(window.row_off), int(window.col_off)
        block = np.asarray(
            self.data[row : row + int(window.height), col : col + int(window.width)],
            dtype=np.float64,
        )
        if self.nodata is not None and not np.isnan(self.nodata):
            block = np.where(block == self.nodata, np.nan, block)
        return block


class RasterStack:
    """
    Ordered stack of raster layers in a single CRS

    Attributes:
        crs: Coordinate reference system shared by every layer

    Examples:
        >>> with RasterStack.open(["ndvi_2013-08-01.tif", "ndvi_2013-08-17.tif"]) as stack:
        ...     stack.count
        2
        >>>
        >>> with rasterio.open("ndvi.tif") as src:
        ...     stack = RasterStack.from_dataset(src)  # borrowed, not closed by the stack
    """

    def __init__(self, layers: Sequence, crs: Any = None, owned: Iterable | None = None):
        self._layers = list(layers)
        self.crs = crs if crs is None or isinstance(crs, CRS) else CRS.from_user_input(crs)
        self._owned = list(owned or [])

    @classmethod
    def open(cls, paths: Iterable[str | Path]) -> "RasterStack":
        """
        Open raster files; every band of every file becomes a layer

        The returned stack owns the datasets and closes them on close().

        Raises:
            ValidationError: If the files do not share one CRS
            ExtractionError: If a file cannot be opened
        """
        datasets = []
        layers = []
        try:
            for path in paths:
                try:
                    dataset = rasterio.open(path, "r")
                except RasterioIOError as e:
                    raise ExtractionError(f"Failed to open {path}: {e}") from e
                datasets.append(dataset)
                if dataset.crs != datasets[0].crs:
                    raise ValidationError('rasters in "env_data" have different projections')
                stem = Path(str(path)).stem
                for band in dataset.indexes:
                    name = dataset.descriptions[band - 1] or (
                        stem if dataset.count == 1 else f"{stem}_{band}"
                    )
                    layers.append(BandLayer(dataset, band, name))
        except BaseException:
            for dataset in datasets:
                dataset.close()
            raise

        crs = datasets[0].crs if datasets else None
        logger.debug("Opened %d layers from %d files", len(layers), len(datasets))
        return cls(layers, crs=crs, owned=datasets)

    @classmethod
    def from_dataset(cls, dataset: Any) -> "RasterStack":
        """Wrap an open rasterio dataset (one layer per band, not owned)"""
        layers = [
            BandLayer(dataset, band, dataset.descriptions[band - 1] or f"band_{band}")
            for band in dataset.indexes
        ]
        return cls(layers, crs=dataset.crs)

    @classmethod
    def from_xarray(
        cls, data: xr.DataArray, crs: Any = None, nodata: float | None = None
    ) -> "RasterStack":
        """
        Wrap a (layer, y, x) DataArray with regular x/y coordinates

        The CRS is taken from ``crs`` or ``data.attrs["crs"]``; nodata from
        ``nodata`` or ``data.attrs["nodata"]``.

        Raises:
            ValidationError: If the array is not 3-D or its x/y coordinates are
                missing or irregular
        """
        if data.ndim != 3:
            raise ValidationError('"env_data" should have dimensions (layer, y, x)')
        layer_dim, y_dim, x_dim = data.dims
        transform = _transform_from_coords(data, x_dim, y_dim)

        if crs is None:
            crs = data.attrs.get("crs")
        if nodata is None:
            nodata = data.attrs.get("nodata")

        if layer_dim in data.coords:
            names = [str(v) for v in data.coords[layer_dim].values]
        else:
            names = [f"layer_{i + 1}" for i in range(data.sizes[layer_dim])]

        layers = [
            ArrayLayer(data.isel({layer_dim: i}), transform, name=names[i], nodata=nodata)
            for i in range(data.sizes[layer_dim])
        ]
        return cls(layers, crs=crs)

    @property
    def count(self) -> int:
        """Number of layers"""
        return len(self._layers)

    @property
    def names(self) -> list[str | None]:
        """Layer names in stack order"""
        return [layer.name for layer in self._layers]

    def layer(self, index: int):
        """Layer at a 0-based position"""
        return self._layers[index]

    def subset(self, indices: Iterable[int]) -> "RasterStack":
        """View on selected layers (0-based, in the given order); owns nothing"""
        return RasterStack([self._layers[i] for i in indices], crs=self.crs)

    def close(self):
        """Close datasets opened by this stack"""
        for dataset in self._owned:
            dataset.close()
        self._owned = []

    def __len__(self) -> int:
        return self.count

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit"""
        self.close()

    def __repr__(self) -> str:
        return f"<RasterStack: {self.count} layers, CRS: {self.crs}>"


def _transform_from_coords(data: xr.DataArray, x_dim: str, y_dim: str) -> Affine:
    """Affine transform from regularly spaced cell-centre coordinates"""
    if x_dim not in data.coords or y_dim not in data.coords:
        raise ValidationError('"env_data" has no x/y coordinates')
    x = np.asarray(data.coords[x_dim].values, dtype=np.float64)
    y = np.asarray(data.coords[y_dim].values, dtype=np.float64)
    if x.size < 2 or y.size < 2:
        raise ValidationError('"env_data" needs at least two cells along x and y')

    dx, dy = x[1] - x[0], y[1] - y[0]
    if not (np.allclose(np.diff(x), dx) and np.allclose(np.diff(y), dy)):
        raise ValidationError('"env_data" x/y coordinates are not regularly spaced')

    return Affine(dx, 0.0, x[0] - dx / 2, 0.0, dy, y[0] - dy / 2)


def parse_layer_dates(names: Iterable[str], fmt: str) -> NDArray:
    """
    Parse acquisition dates from layer names

    Args:
        names: Layer names (e.g. RasterStack.names)
        fmt: strptime format matching the whole name (e.g. "X%Y.%m.%d")

    Returns:
        ``datetime64[D]`` array, one date per name

    Raises:
        ValidationError: If a name does not match the format

    Examples:
        >>> parse_layer_dates(["X2013.08.01", "X2013.08.17"], "X%Y.%m.%d")
        array(['2013-08-01', '2013-08-17'], dtype='datetime64[D]')
    """
    dates = []
    for name in names:
        try:
            dates.append(pd.to_datetime(name, format=fmt))
        except (TypeError, ValueError):
            raise ValidationError(f'layer name "{name}" does not match "{fmt}"') from None
    return pd.DatetimeIndex(dates).to_numpy().astype("datetime64[D]")


def as_stack(source: Any) -> tuple[RasterStack, bool]:
    """
    Coerce a raster source to a RasterStack

    Args:
        source: RasterStack, open rasterio dataset, xarray DataArray, a path
            or a sequence of paths

    Returns:
        (stack, owned) where owned tells whether the caller must close it

    Raises:
        ValidationError: If the source type is not supported
    """
    if isinstance(source, RasterStack):
        return source, False
    if isinstance(source, DatasetReader):
        return RasterStack.from_dataset(source), False
    if isinstance(source, xr.DataArray):
        return RasterStack.from_xarray(source), False
    if isinstance(source, (str, Path)):
        return RasterStack.open([source]), True
    if isinstance(source, (list, tuple)) and all(isinstance(p, (str, Path)) for p in source):
        return RasterStack.open(source), True
    raise ValidationError('"env_data" is not of a valid class')
