"""Map markers for approaches that carry coordinates."""
from typing import List, Optional

DEFAULT_CENTER = (-23.5505, -46.6333)
DEFAULT_ZOOM = 13


def address_line(location: dict) -> str:
    street = location.get("street") or ""
    number = location.get("street_number") or ""
    district = location.get("district") or ""
    line = f"{street}, {number}" if street and number else street or number
    if district:
        line = f"{line} - {district}" if line else district
    return line


def build_markers(approaches: List[dict]) -> List[dict]:
    markers = []
    for a in approaches:
        loc = a["location"]
        # 0.0 is treated as missing, matching how the clients record "no fix"
        if not loc.get("latitude") or not loc.get("longitude"):
            continue
        markers.append({
            "id": a["id"],
            "timestamp": a["timestamp"],
            "latitude": loc["latitude"],
            "longitude": loc["longitude"],
            "address": address_line(loc),
            "people": [p.get("name") or "" for p in a["people"]],
        })
    return markers


def fit_bounds(markers: List[dict]) -> Optional[list]:
    """[[min_lat, min_lon], [max_lat, max_lon]] around all markers, or None."""
    if not markers:
        return None
    lats = [m["latitude"] for m in markers]
    lons = [m["longitude"] for m in markers]
    return [[min(lats), min(lons)], [max(lats), max(lons)]]


def build_map(approaches: List[dict]) -> dict:
    markers = build_markers(approaches)
    return {
        "center": list(DEFAULT_CENTER),
        "zoom": DEFAULT_ZOOM,
        "markers": markers,
        "bounds": fit_bounds(markers),
    }
