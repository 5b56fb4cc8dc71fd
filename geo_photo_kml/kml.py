"""In-memory KML tree built by the document assembler and written by the exporter."""

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class Point:
    """A single position, stored as (longitude, latitude) like KML coordinates."""
    longitude: float
    latitude: float
    altitude: float = 0.0


@dataclass(frozen=True)
class LineString:
    """An ordered polyline of (longitude, latitude) pairs."""
    coordinates: tuple[tuple[float, float], ...]
    extrude: bool = False
    tessellate: bool = True


@dataclass(frozen=True)
class Polygon:
    """A polygon described by its closed outer ring."""
    outer_ring: tuple[tuple[float, float], ...]


Geometry = Union[Point, LineString, Polygon]


@dataclass
class IconStyle:
    href: str | None = None
    scale: float = 1.0


@dataclass
class BalloonStyle:
    id: str
    bg_color: str
    text_color: str
    text: str


@dataclass
class LineStyle:
    color: str
    width: float


@dataclass
class PolyStyle:
    color: str
    color_mode: str = "normal"


@dataclass
class Style:
    """A KML Style; document level when it has an id, inline otherwise."""
    id: str | None = None
    icon: IconStyle | None = None
    balloon: BalloonStyle | None = None
    line: LineStyle | None = None
    poly: PolyStyle | None = None


@dataclass
class StyleMap:
    """Pairs the normal and highlight styles of a photo."""
    id: str
    normal_url: str
    highlight_url: str


@dataclass(eq=False)
class Placemark:
    name: str = ""
    description: str = ""
    geometry: Geometry | None = None
    snippet: str | None = None
    timestamp: str | None = None
    style_url: str | None = None
    style: Style | None = None


@dataclass(eq=False)
class Folder:
    """
    A named container of sub-folders and placemarks.

    Folders compare by identity so that a classifier cache and the polygon
    mirror can use them as dictionary keys.
    """
    name: str
    description: str = ""
    open: bool = False
    features: list = field(default_factory=list)

    def add(self, feature: Union["Folder", Placemark]) -> None:
        self.features.append(feature)

    def folders(self) -> list["Folder"]:
        return [f for f in self.features if isinstance(f, Folder)]

    def placemarks(self) -> list[Placemark]:
        return [f for f in self.features if isinstance(f, Placemark)]


@dataclass(eq=False)
class KMLDocument:
    name: str = ""
    open: bool = True
    styles: list[Style] = field(default_factory=list)
    style_maps: list[StyleMap] = field(default_factory=list)
    features: list = field(default_factory=list)
