"""Type definitions for the geo photo KML application."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .constants import Constants


class FolderBy(Enum):
    """Strategy used to place a photo into the folder hierarchy."""
    NONE = "none"
    DIR = "dir"
    DATE = "date"
    REGEX = "regex"


class SplitBy(Enum):
    """Time granularity separating path segments."""
    NONE = "none"
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class NameBy(Enum):
    """Source of the placemark name."""
    NONE = "none"
    FILE = "file"
    DATE = "date"


class Reference(Enum):
    """How the description balloon refers to the photo."""
    ABSOLUTE = "absolute"
    ABSOLUTE_PATH = "absolute_path"
    RELATIVE = "relative"
    THUMBNAIL = "thumbnail"


class DescriptionMode(Enum):
    """Where the placemark description template comes from."""
    NONE = "none"
    STATIC = "static"
    CUSTOM = "custom"
    EXTERNAL = "external"


class DescriptionSegment(Enum):
    """Tokens that can be substituted into a description, in static order."""
    PHOTO = "+photo"
    FILENAME = "+filename"
    DATE = "+date"
    COORDINATE = "+coordinate"
    ALTITUDE = "+altitude"
    BEARING = "+bearing"


class RunStatus(Enum):
    """Outcome of a document run."""
    COMPLETED = "completed"
    EMPTY = "empty"
    ABORTED = "aborted"
    FAILED = "failed"


@dataclass
class SourceConfig:
    """Source configuration parameters."""
    directory: str | None = None
    file_pattern: str = "*.jpg"
    exclude_pattern: str = ""
    recursive: bool = True
    follow_links: bool = True
    include_null_coordinate: bool = False
    default_lat: float = Constants.DEFAULT_LATITUDE
    default_lon: float = Constants.DEFAULT_LONGITUDE

    @property
    def exclude_patterns(self) -> list[str]:
        """Non-empty exclude substrings."""
        return [p for p in self.exclude_pattern.split(Constants.EXCLUDE_SEPARATOR) if p]


@dataclass
class FolderConfig:
    """Folder classification parameters."""
    folders_by: FolderBy = FolderBy.DIR
    date_pattern: str = "%Y-%W"
    regex: str = r"\d{8}"
    regex_default: str = "12345678"
    root_name: str = "Photos"
    root_description: str = ""


@dataclass
class PathConfig:
    """Path and polygon drawing parameters."""
    draw_path: bool = True
    draw_polygon: bool = False
    width: float = 2.0
    split_by: SplitBy = SplitBy.MONTH


@dataclass
class PlacemarkConfig:
    """Placemark appearance parameters."""
    name_by: NameBy = NameBy.NONE
    date_pattern: str = "%Y-%m-%d %H.%M"
    scale: float = 3.0
    zoom: float = 4.0
    symbol_as_photo: bool = True
    timestamp: bool = True


@dataclass
class PhotoConfig:
    """Photo reference and thumbnail parameters."""
    reference: Reference = Reference.THUMBNAIL
    base_url: str = "https://www.domain.com/img/"
    width_limit: int = 1000
    height_limit: int = 800
    limit_width: bool = True
    limit_height: bool = True
    force_lowercase_extension: bool = False
    thumbnail_size: int = 1000
    thumbnail_border_size: int = 3
    thumbnail_border_color: str = "FFFF00"


@dataclass
class DescriptionConfig:
    """Placemark description parameters."""
    mode: DescriptionMode = DescriptionMode.STATIC
    default_to: bool = True
    default_mode: DescriptionMode = DescriptionMode.STATIC
    photo: bool = True
    filename: bool = True
    date: bool = True
    coordinate: bool = True
    altitude: bool = False
    bearing: bool = False
    custom_value: str = ""
    external_file: str = Constants.EXTERNAL_DESCRIPTION_FILE

    def is_enabled(self, segment: DescriptionSegment) -> bool:
        """Return whether a segment is part of the static description."""
        return getattr(self, segment.name.lower())


@dataclass
class OutputConfig:
    """Output configuration parameters."""
    destination: str | None = None
    verbose: bool = False


@dataclass
class ApplicationConfig:
    """Complete configuration of a single run."""
    source: SourceConfig = field(default_factory=SourceConfig)
    folders: FolderConfig = field(default_factory=FolderConfig)
    path: PathConfig = field(default_factory=PathConfig)
    placemark: PlacemarkConfig = field(default_factory=PlacemarkConfig)
    photo: PhotoConfig = field(default_factory=PhotoConfig)
    description: DescriptionConfig = field(default_factory=DescriptionConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    @property
    def uses_thumbnails(self) -> bool:
        """Thumbnails are needed as placemark symbols or as the referenced photo."""
        return self.placemark.symbol_as_photo or self.photo.reference is Reference.THUMBNAIL


@dataclass
class PhotoRecord:
    """Metadata extracted from a single photo."""
    path: str
    date: datetime
    latitude: float
    longitude: float
    has_exif: bool = True
    has_gps: bool = False
    is_zero_coordinate: bool = True
    orientation: int = 1
    altitude: float | None = None
    bearing: float | None = None
    dimension: tuple[int, int] | None = None

    @property
    def has_location(self) -> bool:
        """A real, non-zero GPS fix is present."""
        return self.has_gps and not self.is_zero_coordinate


@dataclass(frozen=True)
class LineNode:
    """A single timestamped fix on the travel path."""
    date: datetime
    latitude: float
    longitude: float


@dataclass
class RunStatistics:
    """Counters collected during a run."""
    files: int = 0
    exif: int = 0
    gps: int = 0
    placemarks: int = 0
    errors: int = 0
    elapsed: float = 0.0


@dataclass
class RunResult:
    """Outcome of a document run."""
    status: RunStatus
    statistics: RunStatistics
    destination: str | None = None
    kml: str | None = None
    summary: str = ""
    message: str = ""
