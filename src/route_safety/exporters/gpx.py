"""GPX export of analyzed routes with Garmin display colors."""

from pathlib import Path
from typing import List
from xml.etree import ElementTree as ET

import gpxpy.gpx

from ..safety.models import AnalysisReport, RouteAnalysis

GPX_NS = 'http://www.topografix.com/GPX/1/1'
GPXX_NS = 'http://www.garmin.com/xmlschemas/GpxExtensions/v3'

GARMIN_COLORS = {
    'high': 'Green',
    'moderate': 'Yellow',
    'low': 'Red',
}


def _route_track(analysis: RouteAnalysis, recommended: bool) -> gpxpy.gpx.GPXTrack:
    result = analysis.result
    track = gpxpy.gpx.GPXTrack()
    track.name = (
        f"{analysis.route_name} (Safety: {result.overall_safety:.1f}/10)"
        + (" - recommended" if recommended else "")
    )
    track.description = (
        f"Distance: {result.total_distance_km:.2f} km | "
        f"Dangerous segments: {len(result.dangerous_segments)} | "
        f"{analysis.confidence_level}"
    )
    track.type = "Walking"

    # One track segment per route segment so each can carry its own color
    for segment in analysis.segments:
        track_segment = gpxpy.gpx.GPXTrackSegment()
        for waypoint in (segment.start_point, segment.end_point):
            point = gpxpy.gpx.GPXTrackPoint(waypoint.latitude, waypoint.longitude)
            point.name = waypoint.name
            track_segment.points.append(point)
        track.segments.append(track_segment)

    return track


def report_to_gpx(report: AnalysisReport) -> str:
    """Render the report as GPX XML, one track per route in ranking order."""
    gpx = gpxpy.gpx.GPX()
    gpx.name = "Route Safety Analysis"
    gpx.description = (
        f"Safety analysis of {len(report.routes)} candidate routes. "
        f"Recommended: {report.recommended.route_name}."
    )

    for rank, analysis in enumerate(report.routes):
        gpx.tracks.append(_route_track(analysis, recommended=rank == 0))

    return _inject_segment_colors(gpx.to_xml(), report.routes)


def _inject_segment_colors(gpx_xml: str, routes: List[RouteAnalysis]) -> str:
    """
    Add Garmin DisplayColor extensions to every track segment.

    gpxpy does not write per-segment colors itself, so the XML is parsed and
    a TrackExtension element is added to each ``trkseg`` according to the
    safety category of the matching route segment.

    Args:
        gpx_xml: GPX XML string from gpxpy
        routes: Routes in the same order as the GPX tracks

    Returns:
        Modified GPX XML with color extensions
    """
    ET.register_namespace('', GPX_NS)
    ET.register_namespace('gpxx', GPXX_NS)
    root = ET.fromstring(gpx_xml)

    tracks = root.findall(f'{{{GPX_NS}}}trk')
    for track, analysis in zip(tracks, routes):
        track_segments = track.findall(f'{{{GPX_NS}}}trkseg')
        for track_segment, segment in zip(track_segments, analysis.segments):
            extensions = track_segment.find(f'{{{GPX_NS}}}extensions')
            if extensions is None:
                extensions = ET.SubElement(track_segment, f'{{{GPX_NS}}}extensions')

            garmin_ext = ET.SubElement(extensions, f'{{{GPXX_NS}}}TrackExtension')
            display_color = ET.SubElement(garmin_ext, f'{{{GPXX_NS}}}DisplayColor')
            display_color.text = GARMIN_COLORS.get(segment.safety_category, 'DarkGray')

    xml_str = ET.tostring(root, encoding='unicode', method='xml')
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + xml_str


def export_gpx(report: AnalysisReport, output_path: str) -> str:
    """
    Export analyzed routes to a GPX file.

    Args:
        report: Ranked AnalysisReport
        output_path: Path to output GPX file

    Returns:
        Path to output file
    """
    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    with open(output_file, 'w', encoding='utf-8') as f:
        f.write(report_to_gpx(report))

    return str(output_file)
