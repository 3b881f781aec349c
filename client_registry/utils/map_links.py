from __future__ import annotations

from decimal import Decimal

MAP_LINK_TEMPLATES: dict[str, str] = {
    "googleMaps": "https://www.google.com/maps/search/?api=1&query={lat},{lon}",
    "waze": "https://waze.com/ul?ll={lat},{lon}&navigate=yes",
    "appleMaps": "http://maps.apple.com/?daddr={lat},{lon}",
    "sygic": "com.sygic.aura://coordinate|{lat}|{lon}",
    "hereWeGo": "https://wego.here.com/directions/mix//{lat},{lon}",
}


def format_coordinate(value: float) -> str:
    """Render a coordinate as plain decimal text, independent of the process locale.

    Uses the shortest digits that round-trip the float and never switches to
    scientific notation, so ``1e-05`` becomes ``0.00001``.
    """
    text = repr(float(value))
    if "e" in text or "E" in text:
        text = format(Decimal(text), "f")
    return text


def generate_map_links(latitude: float, longitude: float) -> dict[str, str]:
    """Return navigation links for the coordinates, keyed by provider in a fixed order."""
    lat = format_coordinate(latitude)
    lon = format_coordinate(longitude)
    return {name: template.format(lat=lat, lon=lon) for name, template in MAP_LINK_TEMPLATES.items()}
