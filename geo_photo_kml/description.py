"""Placemark description templates and token substitution."""

import logging
import os
from collections import ChainMap
from pathlib import Path

from geopy.point import Point

from .constants import Constants
from .gps import PhotoInfoExtractor
from .types import ApplicationConfig, DescriptionMode, DescriptionSegment, PhotoRecord, Reference
from .utils import PathNormalizer, PropertiesLoader, Scaler, safe_xml_string

IMAGE_TAG = "<p><img src='{src}' width='{width}' height='{height}'></p>"


def segment_html(segment: DescriptionSegment) -> str:
    """Static description markup of a segment."""
    if segment is DescriptionSegment.FILENAME:
        return f"<h2>{segment.value}</h2>\n"
    return f"<p>{segment.value}</p>\n"


class DescriptionBuilder:
    """Builds the HTML description of a photo placemark."""

    def __init__(
        self,
        app_config: ApplicationConfig,
        extractor: PhotoInfoExtractor,
        logger: logging.Logger,
    ):
        self.app_config = app_config
        self.config = app_config.description
        self.photo_config = app_config.photo
        self.extractor = extractor
        self.logger = logger
        self.properties_loader = PropertiesLoader(logger)
        self._source_dir = self._resolve_source_dir(app_config.source.directory)
        self._root_properties: dict[str, str] | None = None
        self._dir_properties: dict[str, ChainMap] = {}

    def build(self, record: PhotoRecord, thumbnail_path: Path | None = None) -> str:
        """
        Description of a photo, CDATA-wrapped when it contains markup.

        Returns an empty string in NONE mode.
        """
        mode = self.config.mode
        if mode is DescriptionMode.NONE:
            return ""

        if mode is DescriptionMode.STATIC:
            desc = self.static_template()
        elif mode is DescriptionMode.CUSTOM:
            desc = self.custom_template()
        else:
            desc = self.external_template(record.path)

        return safe_xml_string(self.substitute(desc, record, thumbnail_path))

    def static_template(self) -> str:
        return "".join(
            segment_html(segment)
            for segment in DescriptionSegment
            if self.config.is_enabled(segment)
        )

    def custom_template(self) -> str:
        if self.config.custom_value.strip():
            return self.config.custom_value
        return "".join(segment_html(segment) for segment in DescriptionSegment)

    def external_template(self, file_path: str) -> str:
        """
        Template looked up by file basename in the directory's description file.

        The source root's description file supplies values missing from the
        photo's own directory.
        """
        properties = self._properties_for(os.path.dirname(os.path.abspath(file_path)))
        key = Path(file_path).stem
        if key in properties:
            return properties[key]

        if self.config.default_to:
            if self.config.default_mode is DescriptionMode.CUSTOM:
                return self.config.custom_value
            if self.config.default_mode is DescriptionMode.STATIC:
                return self.static_template()
        return "&nbsp;"

    def substitute(self, desc: str, record: PhotoRecord, thumbnail_path: Path | None = None) -> str:
        photo_token = DescriptionSegment.PHOTO.value
        if photo_token in desc.lower():
            desc = desc.replace(photo_token, self.image_tag(record, thumbnail_path))

        desc = desc.replace(DescriptionSegment.FILENAME.value, os.path.basename(record.path))
        desc = desc.replace(
            DescriptionSegment.DATE.value, record.date.strftime(Constants.DESCRIPTION_DATE_FORMAT)
        )

        if record.has_gps and not record.is_zero_coordinate:
            coordinate = Point(record.latitude, record.longitude).format(
                deg_char="°", min_char="'", sec_char='"'
            )
            altitude = "" if record.altitude is None else f"{record.altitude:g} metres"
            bearing = "" if record.bearing is None else f"{record.bearing:g} degrees"
        else:
            coordinate = altitude = bearing = ""

        desc = desc.replace(DescriptionSegment.COORDINATE.value, coordinate)
        desc = desc.replace(DescriptionSegment.ALTITUDE.value, altitude)
        return desc.replace(DescriptionSegment.BEARING.value, bearing)

    def image_tag(self, record: PhotoRecord, thumbnail_path: Path | None = None) -> str:
        """
        The ``<img>`` paragraph for a photo.

        The original size is fitted into the enabled limits. Thumbnails are stored
        upright, so for a rotated portrait photo the limits are applied to the
        sensor frame swapped and the resulting size swapped back.
        """
        width, height = self.extractor.get_dimension(record)
        thumbnail_ref = self.photo_config.reference is Reference.THUMBNAIL
        portrait = record.orientation in Constants.PORTRAIT_ORIENTATIONS and thumbnail_ref

        scaler = Scaler(width, height)
        if self.photo_config.limit_width:
            scaler.limit_width(self.photo_config.height_limit if portrait else self.photo_config.width_limit)
        if self.photo_config.limit_height:
            scaler.limit_height(self.photo_config.width_limit if portrait else self.photo_config.height_limit)

        new_width, new_height = scaler.dimension
        if portrait:
            new_width, new_height = new_height, new_width

        return IMAGE_TAG.format(
            src=self.image_path(record.path, thumbnail_path), width=new_width, height=new_height
        )

    def image_path(self, file_path: str, thumbnail_path: Path | None = None) -> str:
        reference = self.photo_config.reference
        destination = self.app_config.output.destination or "."

        if reference is Reference.ABSOLUTE:
            path = PathNormalizer.get_kml_image_path(file_path)
        elif reference is Reference.ABSOLUTE_PATH:
            path = self.photo_config.base_url + os.path.basename(file_path)
        elif reference is Reference.RELATIVE:
            path = PathNormalizer.get_relative_path(file_path, destination)
        else:
            target = thumbnail_path if thumbnail_path is not None else file_path
            path = PathNormalizer.get_relative_path(str(target), destination)

        path = PathNormalizer.to_forward_slashes(path)
        if self.photo_config.force_lowercase_extension:
            path = PathNormalizer.lowercase_extension(path)
        return path

    def _properties_for(self, directory: str) -> ChainMap:
        if self._root_properties is None:
            self._root_properties = self.properties_loader.load(
                Path(self._source_dir) / self.config.external_file
            )

        properties = self._dir_properties.get(directory)
        if properties is None:
            own = {}
            if os.path.normcase(directory) != os.path.normcase(self._source_dir):
                own = self.properties_loader.load(Path(directory) / self.config.external_file)
            properties = ChainMap(own, self._root_properties)
            self._dir_properties[directory] = properties
        return properties

    @staticmethod
    def _resolve_source_dir(source: str | None) -> str:
        if not source:
            return os.path.abspath(".")
        source = os.path.abspath(source)
        return os.path.dirname(source) if os.path.isfile(source) else source
