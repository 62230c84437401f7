from __future__ import annotations

from dataclasses import dataclass

from coastal_backend.schemas.coastal import Location


@dataclass(frozen=True)
class MarineStation:
    id: str
    name: str
    lat: float
    lng: float

    @property
    def location(self) -> Location:
        return Location(lat=self.lat, lng=self.lng, name=self.name)


# Known stations; any other id configured via env gets a placeholder location.
KNOWN_STATIONS = {
    # NOAA tide gauges
    "9447130": MarineStation("9447130", "Seattle, WA", 47.6026, -122.3393),
    "8727520": MarineStation("8727520", "Miami, FL", 25.7617, -80.1918),
    "9410230": MarineStation("9410230", "San Diego, CA", 32.7157, -117.1611),
    "9443090": MarineStation("9443090", "Neah Bay, WA", 48.3708, -124.6241),
    # NDBC buoys
    "46088": MarineStation("46088", "Kerala Coast", 9.9312, 76.2673),
    "41012": MarineStation("41012", "Goa Offshore", 15.2993, 73.9872),
    "46042": MarineStation("46042", "Mumbai Offshore", 18.9217, 72.8347),
    "41008": MarineStation("41008", "Chennai Offshore", 13.0827, 80.2707),
    # USGS water quality sites
    "12345678": MarineStation("12345678", "Mumbai Harbor", 18.9217, 72.8347),
    "8764227": MarineStation("8764227", "Chennai Coast", 13.0827, 80.2707),
}


def get_station(station_id: str) -> MarineStation:
    return KNOWN_STATIONS.get(station_id) or MarineStation(station_id, f"Station {station_id}", 0.0, 0.0)
