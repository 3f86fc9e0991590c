"""
trackenv Tracking Demo

Relates tracking points to a directory of dated single-band rasters
(e.g. 16-day NDVI composites) and prints the nearest values and the
local trend around each observation.

Prerequisites:
- Raster files sharing one CRS, one date per file encoded in the file name
- A point layer (GeoPackage, Shapefile, ...) in the same CRS with a date column

Usage:
    python examples/demo_tracks.py --raster-dir ./ndvi --tracks ./tracks.gpkg \
        --name-format "ndvi_%Y-%m-%d" --date-column date
"""

import argparse
from pathlib import Path

import geopandas as gpd
import pandas as pd

import trackenv as te


def parse_args():
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(description="trackenv Tracking Demo")
    parser.add_argument("--raster-dir", type=str, required=True, help="Directory of rasters")
    parser.add_argument("--tracks", type=str, required=True, help="Point layer with dates")
    parser.add_argument(
        "--name-format",
        type=str,
        default="ndvi_%Y-%m-%d",
        help="strptime format of raster file names (default: ndvi_%%Y-%%m-%%d)",
    )
    parser.add_argument(
        "--date-column", type=str, default="date", help="Observation date column (default: date)"
    )
    parser.add_argument(
        "--before", type=float, default=30, help="Days before the observation (default: 30)"
    )
    parser.add_argument(
        "--after", type=float, default=30, help="Days after the observation (default: 30)"
    )
    return parser.parse_args()


def main():
    args = parse_args()

    files = sorted(Path(args.raster_dir).glob("*.tif"))
    tracks = gpd.read_file(args.tracks)
    obs_dates = pd.to_datetime(tracks[args.date_column])

    with te.RasterStack.open(files) as stack:
        env_dates = te.parse_layer_dates(stack.names, args.name_format)
        print(f"{stack.count} layers, {len(tracks)} samples")

        nearest = te.data_query(
            tracks, obs_dates, stack, env_dates, time_buffer=(args.before, args.after)
        )
        trend = te.time_dir(
            tracks, obs_dates, stack, env_dates, temporal_buffer=(args.before, 0)
        )

    summary = nearest.assign(trend=trend["value"])
    print(summary.describe(include="all"))
    print(f"Samples without a value: {summary['value'].isna().sum()}")


if __name__ == "__main__":
    main()
