"""
Sample coordinates and coordinate reference checks
"""

from dataclasses import dataclass
from typing import Any

import geopandas as gpd
import numpy as np
from numpy.typing import NDArray
from rasterio.crs import CRS

from trackenv.core.exceptions import ValidationError


def _normalize_crs(crs: Any) -> CRS | None:
    if crs is None or isinstance(crs, CRS):
        return crs
    return CRS.from_user_input(crs)


def same_crs(a: Any, b: Any) -> bool:
    """
    Exact comparison of two coordinate reference systems

    Accepts anything rasterio understands (EPSG strings, WKT, pyproj CRS).
    Two missing CRS compare equal; one missing CRS does not.

    Examples:
        >>> same_crs("EPSG:4326", CRS.from_epsg(4326))
        True
    """
    a, b = _normalize_crs(a), _normalize_crs(b)
    if a is None or b is None:
        return a is None and b is None
    return a == b


@dataclass(frozen=True)
class Samples:
    """
    Ordered sample locations

    Attributes:
        coords: Array of shape (n, 2) with x, y columns
        crs: Coordinate reference system (None if unknown)

    Examples:
        >>> xy = Samples.from_xy([500010.0, 500020.0], [4600010.0, 4600020.0], crs="EPSG:32633")
        >>> len(xy)
        2
    """

    coords: NDArray
    crs: CRS | None = None

    def __post_init__(self):
        coords = np.asarray(self.coords, dtype=np.float64)
        if coords.ndim != 2 or coords.shape[1] != 2:
            raise ValidationError('"xy" should have two coordinate columns')
        if not np.isfinite(coords).all():
            raise ValidationError('"xy" contains missing coordinates')
        object.__setattr__(self, "coords", coords)
        object.__setattr__(self, "crs", _normalize_crs(self.crs))

    @classmethod
    def from_xy(cls, x: Any, y: Any, crs: Any = None) -> "Samples":
        """Build samples from separate x and y sequences"""
        x = np.asarray(x, dtype=np.float64).ravel()
        y = np.asarray(y, dtype=np.float64).ravel()
        if x.shape != y.shape:
            raise ValidationError('lengths of "x" and "y" differ')
        return cls(coords=np.column_stack([x, y]), crs=crs)

    @classmethod
    def from_geodataframe(cls, frame: gpd.GeoDataFrame | gpd.GeoSeries) -> "Samples":
        """
        Build samples from point geometries

        Raises:
            ValidationError: If any geometry is missing, empty or not a point
        """
        geometry = frame.geometry if isinstance(frame, gpd.GeoDataFrame) else frame
        if geometry.isna().any() or geometry.is_empty.any():
            raise ValidationError('"xy" contains missing geometries')
        if not (geometry.geom_type == "Point").all():
            raise ValidationError('"xy" should contain point geometries')
        return cls(coords=np.column_stack([geometry.x, geometry.y]), crs=frame.crs)

    @property
    def x(self) -> NDArray:
        return self.coords[:, 0]

    @property
    def y(self) -> NDArray:
        return self.coords[:, 1]

    def __len__(self) -> int:
        return self.coords.shape[0]

    def __repr__(self) -> str:
        return f"<Samples: {len(self)} points, CRS: {self.crs}>"


def as_samples(xy: Any) -> Samples:
    """
    Coerce supported sample inputs to Samples

    Args:
        xy: Samples, GeoDataFrame or GeoSeries of points

    Raises:
        ValidationError: If xy is missing or of an unsupported type
    """
    if xy is None:
        raise ValidationError('"xy" is missing')
    if isinstance(xy, Samples):
        return xy
    if isinstance(xy, (gpd.GeoDataFrame, gpd.GeoSeries)):
        return Samples.from_geodataframe(xy)
    raise ValidationError('"xy" is not of a valid class')
