"""
Location registry: the set of regions a forecast may target.

Each entry carries coordinates (for live weather lookup), state/country
metadata (for prompt locale context), aliases, and optional baseline
climate/population values consumed by the static fallback tier. The bundled
table covers major Indian cities; deployments can replace it wholesale with
a JSON file (``Settings.regions_file``).

JSON format: a list of objects with the ``Location`` field names, e.g.
    [{"name": "Jaipur", "state": "Rajasthan", "country": "India",
      "latitude": 26.9124, "longitude": 75.7873, "aliases": [],
      "avg_temp": 28, "humidity": 55, "population": 3046163}]
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Iterable, Optional

from sectorcast.errors import RegionUnknown

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Location:
    """Immutable region definition."""

    name: str
    state: str
    country: str
    latitude: float
    longitude: float
    aliases: tuple[str, ...] = ()
    avg_temp: Optional[float] = None  # annual mean, Celsius
    humidity: Optional[float] = None  # annual mean, percent
    population: Optional[int] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["aliases"] = list(self.aliases)
        return data


# ---------------------------------------------------------------------------
# Bundled table: Indian metros. Baselines where reliable figures exist.
# ---------------------------------------------------------------------------

BUNDLED_LOCATIONS: list[Location] = [
    Location("Mumbai", "Maharashtra", "India", 19.0760, 72.8777, ("Bombay",), 29, 78, 12442373),
    Location("Delhi", "Delhi", "India", 28.7041, 77.1025, ("New Delhi",), 27, 62, 11007835),
    Location("Bangalore", "Karnataka", "India", 12.9716, 77.5946, ("Bengaluru",), 24, 68, 8443675),
    Location("Hyderabad", "Telangana", "India", 17.3850, 78.4867, (), 26, 65, 6993262),
    Location("Chennai", "Tamil Nadu", "India", 13.0827, 80.2707, ("Madras",), 31, 75, 4681087),
    Location("Kolkata", "West Bengal", "India", 22.5726, 88.3639, ("Calcutta",), 28, 82, 4496694),
    Location("Pune", "Maharashtra", "India", 18.5204, 73.8567, ("Poona",), 25, 70, 3124458),
    Location("Ahmedabad", "Gujarat", "India", 23.0225, 72.5714, (), 30, 58, 5633927),
    Location("Jaipur", "Rajasthan", "India", 26.9124, 75.7873, (), 28, 55, 3046163),
    Location("Lucknow", "Uttar Pradesh", "India", 26.8467, 80.9462, (), 26, 68, 2817105),
    Location("Surat", "Gujarat", "India", 21.1702, 72.8311, (), population=4467797),
    Location("Kanpur", "Uttar Pradesh", "India", 26.4499, 80.3319, (), population=2767031),
    Location("Nagpur", "Maharashtra", "India", 21.1458, 79.0882, (), population=2405421),
    Location("Indore", "Madhya Pradesh", "India", 22.7196, 75.8577, (), population=1964086),
    Location("Thane", "Maharashtra", "India", 19.2183, 72.9781, (), population=1818872),
    Location("Bhopal", "Madhya Pradesh", "India", 23.2599, 77.4126, (), population=1795648),
    Location("Visakhapatnam", "Andhra Pradesh", "India", 17.6868, 83.2185, ("Vizag",), population=1730320),
    Location("Patna", "Bihar", "India", 25.5941, 85.1376, (), population=1684222),
    Location("Vadodara", "Gujarat", "India", 22.3072, 73.1812, ("Baroda",), population=1666703),
    Location("Varanasi", "Uttar Pradesh", "India", 25.3176, 82.9739, ("Benares", "Kashi")),
]


def _key(name: str) -> str:
    return " ".join(name.split()).casefold()


class LocationRegistry:
    """Case-insensitive region lookup with alias support."""

    def __init__(self, locations: Iterable[Location]) -> None:
        self._locations: list[Location] = []
        self._index: dict[str, Location] = {}
        for loc in locations:
            self._locations.append(loc)
            for name in (loc.name, *loc.aliases):
                key = _key(name)
                if key in self._index and self._index[key] is not loc:
                    raise ValueError(f"Duplicate region name or alias: {name!r}")
                self._index[key] = loc

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and _key(name) in self._index

    def __len__(self) -> int:
        return len(self._locations)

    def __iter__(self):
        return iter(self._locations)

    def get(self, name: str) -> Optional[Location]:
        return self._index.get(_key(name))

    def resolve(self, name: str) -> Location:
        """Return the canonical location for *name* or raise RegionUnknown."""
        loc = self.get(name) if isinstance(name, str) else None
        if loc is None:
            raise RegionUnknown(str(name))
        return loc

    @classmethod
    def default(cls) -> LocationRegistry:
        return cls(BUNDLED_LOCATIONS)

    @classmethod
    def from_json(cls, path: str | Path) -> LocationRegistry:
        """Load a registry from a JSON list of location objects."""
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(raw, list):
            raise ValueError(f"{path}: expected a JSON list of locations")
        locations = []
        for entry in raw:
            entry = dict(entry)
            entry["aliases"] = tuple(entry.get("aliases", ()))
            locations.append(Location(**entry))
        logger.info("Loaded %d locations from %s", len(locations), path)
        return cls(locations)
