"""Exporters for route safety analysis reports."""

from .report import report_to_dict, export_json
from .geojson import report_to_geojson, export_geojson
from .gpx import report_to_gpx, export_gpx

__all__ = [
    "report_to_dict",
    "export_json",
    "report_to_geojson",
    "export_geojson",
    "report_to_gpx",
    "export_gpx",
]
