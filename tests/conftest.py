"""Pytest configuration and shared fixtures for geo_photo_kml tests."""

import tempfile
from datetime import datetime
from fractions import Fraction
from pathlib import Path
from unittest.mock import Mock

import piexif
import pytest
from PIL import Image

from geo_photo_kml.types import (
    ApplicationConfig, SourceConfig, FolderConfig, PathConfig, PlacemarkConfig,
    PhotoConfig, DescriptionConfig, OutputConfig
)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests of a single class or function")
    config.addinivalue_line("markers", "integration: tests that run several components on real files")


# =============================================================================
# Test Configuration
# =============================================================================

@pytest.fixture
def temp_dir():
    """Temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def mock_logger():
    """Mock logger for testing."""
    logger = Mock()
    logger.info = Mock()
    logger.warning = Mock()
    logger.error = Mock()
    logger.debug = Mock()
    return logger


# =============================================================================
# Photo Fixtures
# =============================================================================

def _to_rational(value: float) -> tuple[int, int]:
    fraction = Fraction(value).limit_denominator(1_000_000)
    return fraction.numerator, fraction.denominator


def decimal_to_dms(decimal: float) -> tuple:
    """Convert decimal degrees to EXIF rational degrees, minutes, seconds."""
    decimal = abs(decimal)
    degrees = int(decimal)
    minutes_decimal = (decimal - degrees) * 60
    minutes = int(minutes_decimal)
    seconds = (minutes_decimal - minutes) * 60
    return ((degrees, 1), (minutes, 1), _to_rational(seconds))


def write_photo(
    path: Path,
    latitude: float | None = None,
    longitude: float | None = None,
    date: datetime | None = datetime(2024, 1, 15, 10, 30, 0),
    size: tuple[int, int] = (400, 300),
    orientation: int | None = None,
    altitude: float | None = None,
    bearing: float | None = None,
    exif: bool = True,
    gps_without_location: bool = False,
    color: str = "skyblue",
) -> Path:
    """
    Write a real JPEG with the requested EXIF content.

    latitude/longitude of None leaves the GPS directory out entirely.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    img = Image.new("RGB", size, color=color)

    if not exif:
        img.save(path, "JPEG")
        return path

    exif_dict = {"0th": {}, "Exif": {}, "GPS": {}}
    if date is not None:
        exif_dict["Exif"][piexif.ExifIFD.DateTimeOriginal] = date.strftime("%Y:%m:%d %H:%M:%S").encode()
    if orientation is not None:
        exif_dict["0th"][piexif.ImageIFD.Orientation] = orientation
    if not exif_dict["0th"] and not exif_dict["Exif"]:
        exif_dict["0th"][piexif.ImageIFD.Make] = b"TestCam"

    if gps_without_location:
        exif_dict["GPS"][piexif.GPSIFD.GPSVersionID] = (2, 2, 0, 0)
    elif latitude is not None and longitude is not None:
        exif_dict["GPS"].update({
            piexif.GPSIFD.GPSLatitude: decimal_to_dms(latitude),
            piexif.GPSIFD.GPSLatitudeRef: b"N" if latitude >= 0 else b"S",
            piexif.GPSIFD.GPSLongitude: decimal_to_dms(longitude),
            piexif.GPSIFD.GPSLongitudeRef: b"E" if longitude >= 0 else b"W",
        })
        if altitude is not None:
            exif_dict["GPS"][piexif.GPSIFD.GPSAltitude] = _to_rational(abs(altitude))
            exif_dict["GPS"][piexif.GPSIFD.GPSAltitudeRef] = 1 if altitude < 0 else 0
        if bearing is not None:
            exif_dict["GPS"][piexif.GPSIFD.GPSDestBearing] = _to_rational(bearing)

    img.save(path, "JPEG", exif=piexif.dump(exif_dict))
    return path


@pytest.fixture
def make_photo():
    """Factory fixture writing JPEG files with EXIF and GPS data."""
    return write_photo


@pytest.fixture
def photo_tree(temp_dir, make_photo):
    """
    A small source tree:

        photos/trip/a.jpg        GPS, 2024-01-15 10:30
        photos/trip/b.jpg        GPS, 2024-01-15 12:00
        photos/trip/day2/c.jpg   GPS, 2024-01-16 09:00
        photos/nogps.jpg         EXIF without GPS
        photos/notes.txt         not a photo
    """
    root = temp_dir / "photos"
    make_photo(root / "trip" / "a.jpg", 57.70, 11.97, datetime(2024, 1, 15, 10, 30))
    make_photo(root / "trip" / "b.jpg", 57.71, 11.99, datetime(2024, 1, 15, 12, 0))
    make_photo(root / "trip" / "day2" / "c.jpg", 57.72, 11.95, datetime(2024, 1, 16, 9, 0))
    make_photo(root / "nogps.jpg", date=datetime(2024, 1, 17, 8, 0))
    (root / "notes.txt").write_text("not a photo")
    return root


# =============================================================================
# Configuration Fixtures
# =============================================================================

@pytest.fixture
def app_config_factory(temp_dir):
    """Factory for ApplicationConfig with sensible test defaults."""

    def factory(source_dir: Path, /, destination: Path | None = None, **sections) -> ApplicationConfig:
        config = ApplicationConfig(
            source=SourceConfig(directory=str(source_dir)),
            folders=FolderConfig(),
            path=PathConfig(),
            placemark=PlacemarkConfig(),
            photo=PhotoConfig(),
            description=DescriptionConfig(),
            output=OutputConfig(destination=str(destination or temp_dir / "out" / "photos.kml")),
        )
        for section, values in sections.items():
            target = getattr(config, section)
            for key, value in values.items():
                setattr(target, key, value)
        return config

    return factory


@pytest.fixture
def sample_toml_config():
    """Sample TOML configuration content."""
    return """# Test configuration file
[source]
file_pattern = "*.jpeg"
exclude_pattern = "tmp::cache"
recursive = false
include_null_coordinate = true

[folders]
folders_by = "DATE"
date_pattern = "%Y-%m"

[path]
draw_polygon = true
width = 4.5
split_by = "day"

[placemark]
name_by = "file"
scale = 2.0

[photo]
reference = "relative"
thumbnail_border_color = "FF0000"

[description]
mode = "custom"
custom_value = "<b>+filename</b>"

[output]
destination = "from_config.kml"
verbose = true
"""
