"""Tests for the types and kml modules.

These tests validate dataclass definitions and type structures.
They serve as documentation for the data structures used throughout the application.
"""

from datetime import datetime

import pytest

from geo_photo_kml.constants import Constants
from geo_photo_kml.kml import Folder, Placemark, Point
from geo_photo_kml.types import (
    ApplicationConfig, DescriptionConfig, DescriptionSegment, PhotoConfig, PhotoRecord,
    PlacemarkConfig, Reference, RunStatistics, SourceConfig
)


class TestConfigurations:
    """Test suite for configuration dataclasses."""

    @pytest.mark.unit
    def test_source_defaults(self):
        """
        Test SourceConfig defaults.

        This test documents what a run scans when only a directory is given.
        """
        config = SourceConfig(directory="/photos")

        assert config.file_pattern == "*.jpg"
        assert config.recursive is True
        assert config.follow_links is True
        assert config.include_null_coordinate is False
        assert (config.default_lat, config.default_lon) == (Constants.DEFAULT_LATITUDE, Constants.DEFAULT_LONGITUDE)
        assert config.exclude_patterns == []

    @pytest.mark.unit
    def test_exclude_patterns_drop_empty_entries(self):
        config = SourceConfig(exclude_pattern="::.thumbs::::backup::")

        assert config.exclude_patterns == [".thumbs", "backup"]

    @pytest.mark.unit
    @pytest.mark.parametrize("symbol_as_photo, reference, expected", [
        (True, Reference.RELATIVE, True),
        (False, Reference.THUMBNAIL, True),
        (False, Reference.ABSOLUTE, False),
    ])
    def test_uses_thumbnails(self, symbol_as_photo, reference, expected):
        config = ApplicationConfig(
            placemark=PlacemarkConfig(symbol_as_photo=symbol_as_photo),
            photo=PhotoConfig(reference=reference),
        )

        assert config.uses_thumbnails is expected

    @pytest.mark.unit
    def test_description_segments(self):
        """
        Test the description segment switches.

        This test documents the segments shown by default in the static
        description and their fixed order.
        """
        config = DescriptionConfig()

        enabled = [s for s in DescriptionSegment if config.is_enabled(s)]

        assert enabled == [
            DescriptionSegment.PHOTO,
            DescriptionSegment.FILENAME,
            DescriptionSegment.DATE,
            DescriptionSegment.COORDINATE,
        ]

    @pytest.mark.unit
    def test_sections_are_independent(self):
        first = ApplicationConfig()
        second = ApplicationConfig()
        first.source.directory = "/a"

        assert second.source.directory is None


class TestPhotoRecord:
    """Test suite for PhotoRecord dataclass."""

    @pytest.mark.unit
    @pytest.mark.parametrize("has_gps, is_zero, expected", [
        (True, False, True),
        (True, True, False),
        (False, True, False),
    ])
    def test_has_location(self, has_gps, is_zero, expected):
        record = PhotoRecord(
            path="a.jpg",
            date=datetime(2024, 1, 1),
            latitude=1.0,
            longitude=2.0,
            has_gps=has_gps,
            is_zero_coordinate=is_zero,
        )

        assert record.has_location is expected

    @pytest.mark.unit
    def test_statistics_start_at_zero(self):
        stats = RunStatistics()

        assert (stats.files, stats.exif, stats.gps, stats.placemarks, stats.errors) == (0, 0, 0, 0, 0)


class TestFolder:
    """Test suite for the in-memory KML folder."""

    @pytest.mark.unit
    def test_folders_and_placemarks_keep_insertion_order(self):
        """
        Test folder children.

        This test documents that sub-folders and placemarks share one
        ordered feature list and can be listed separately.
        """
        root = Folder(name="Photos")
        first = Placemark(name="first", geometry=Point(1.0, 2.0))
        child = Folder(name="child")
        second = Placemark(name="second")
        root.add(first)
        root.add(child)
        root.add(second)
        child.add(Placemark(name="nested"))

        assert root.folders() == [child]
        assert root.placemarks() == [first, second]
        assert child.placemarks()[0].name == "nested"

    @pytest.mark.unit
    def test_folders_compare_by_identity(self):
        assert Folder(name="a") != Folder(name="a")
        cache = {Folder(name="a"): 1}
        assert len(cache) == 1
