"""Configuration management for the geo photo KML application."""

import argparse
import logging
import re
import sys
from dataclasses import fields
from enum import Enum
from pathlib import Path

import tomllib

from .constants import Constants
from .exceptions import ConfigurationError, FileOperationError
from .types import (
    ApplicationConfig,
    DescriptionConfig,
    DescriptionMode,
    FolderBy,
    FolderConfig,
    NameBy,
    OutputConfig,
    PathConfig,
    PhotoConfig,
    PlacemarkConfig,
    Reference,
    SourceConfig,
    SplitBy,
)

# (toml_section, arg_name, toml_field, merge_strategy[, enum_type])
FIELD_MAPPINGS = [
    ("source", "source", "directory", "none_check"),
    ("source", "file_pattern", "file_pattern", "none_check"),
    ("source", "exclude", "exclude_pattern", "none_check"),
    ("source", "recursive", "recursive", "none_check"),
    ("source", "follow_links", "follow_links", "none_check"),
    ("source", "include_null", "include_null_coordinate", "none_check"),
    ("source", "default_lat", "default_lat", "none_check"),
    ("source", "default_lon", "default_lon", "none_check"),
    ("folders", "folders_by", "folders_by", "enum", FolderBy),
    ("folders", "folder_date_pattern", "date_pattern", "none_check"),
    ("folders", "regex", "regex", "none_check"),
    ("folders", "regex_default", "regex_default", "none_check"),
    ("folders", "root_name", "root_name", "none_check"),
    ("folders", "root_description", "root_description", "none_check"),
    ("path", "draw_path", "draw_path", "none_check"),
    ("path", "draw_polygon", "draw_polygon", "none_check"),
    ("path", "path_width", "width", "none_check"),
    ("path", "split_by", "split_by", "enum", SplitBy),
    ("placemark", "name_by", "name_by", "enum", NameBy),
    ("placemark", "placemark_date_pattern", "date_pattern", "none_check"),
    ("placemark", "scale", "scale", "none_check"),
    ("placemark", "zoom", "zoom", "none_check"),
    ("placemark", "symbol_as_photo", "symbol_as_photo", "none_check"),
    ("placemark", "timestamp", "timestamp", "none_check"),
    ("photo", "reference", "reference", "enum", Reference),
    ("photo", "base_url", "base_url", "none_check"),
    ("photo", "width_limit", "width_limit", "none_check"),
    ("photo", "height_limit", "height_limit", "none_check"),
    ("photo", "limit_width", "limit_width", "none_check"),
    ("photo", "limit_height", "limit_height", "none_check"),
    ("photo", "lowercase_extension", "force_lowercase_extension", "none_check"),
    ("photo", "thumbnail_size", "thumbnail_size", "none_check"),
    ("photo", "border_size", "thumbnail_border_size", "none_check"),
    ("photo", "border_color", "thumbnail_border_color", "none_check"),
    ("description", "description_mode", "mode", "enum", DescriptionMode),
    ("description", "default_to", "default_to", "none_check"),
    ("description", "default_mode", "default_mode", "enum", DescriptionMode),
    ("description", "desc_photo", "photo", "none_check"),
    ("description", "desc_filename", "filename", "none_check"),
    ("description", "desc_date", "date", "none_check"),
    ("description", "desc_coordinate", "coordinate", "none_check"),
    ("description", "desc_altitude", "altitude", "none_check"),
    ("description", "desc_bearing", "bearing", "none_check"),
    ("description", "custom_description", "custom_value", "none_check"),
    ("description", "external_file", "external_file", "none_check"),
    ("output", "output", "destination", "none_check"),
    ("output", "verbose", "verbose", "none_check"),
]

SECTION_TYPES = {
    "source": SourceConfig,
    "folders": FolderConfig,
    "path": PathConfig,
    "placemark": PlacemarkConfig,
    "photo": PhotoConfig,
    "description": DescriptionConfig,
    "output": OutputConfig,
}

SAMPLE_CONFIG = """# Geo Photo KML Configuration File
# Save this as geo_photo_kml.toml in your working directory,
# ~/.config/geo_photo_kml/config.toml, or ~/.geo_photo_kml.toml

[source]
directory = "/path/to/photos"   # Directory (or single file) to scan
file_pattern = "*.jpg"          # Include glob, matched case-insensitively
exclude_pattern = ""            # Substrings to skip, separated by ::
recursive = true
follow_links = true
include_null_coordinate = false # Also place photos without a GPS fix
default_lat = 57.6              # Used for photos without a GPS fix
default_lon = 11.3

[folders]
folders_by = "dir"              # none, dir, date or regex
date_pattern = "%Y-%W"          # strftime pattern when folders_by = "date"
regex = '\\d{8}'                # First match in the parent path when folders_by = "regex"
regex_default = "12345678"      # Folder used when the regex does not match
root_name = "Photos"
root_description = ""

[path]
draw_path = true
draw_polygon = false
width = 2.0
split_by = "month"              # none, hour, day, week, month or year

[placemark]
name_by = "none"                # none, file or date
date_pattern = "%Y-%m-%d %H.%M"
scale = 3.0
zoom = 4.0
symbol_as_photo = true
timestamp = true

[photo]
reference = "thumbnail"         # absolute, absolute_path, relative or thumbnail
base_url = "https://www.domain.com/img/"
width_limit = 1000
height_limit = 800
limit_width = true
limit_height = true
force_lowercase_extension = false
thumbnail_size = 1000
thumbnail_border_size = 3
thumbnail_border_color = "FFFF00"

[description]
mode = "static"                 # none, static, custom or external
default_to = true               # external mode: fall back when a photo has no entry
default_mode = "static"         # static or custom
photo = true
filename = true
date = true
coordinate = true
altitude = false
bearing = false
custom_value = ""               # Tokens: +photo +filename +date +coordinate +altitude +bearing
external_file = "mapollage_descriptions.txt"

[output]
destination = "photos.kml"
verbose = false
"""


class ConfigurationManager:
    """Manages application configuration by parsing command-line arguments and TOML
        configuration files, merging their values, validating the resulting configuration,
        and providing configuration objects for use throughout the application.

    Responsibilities:
        - Parse command-line arguments using argparse.
        - Load configuration from TOML files, supporting multiple standard locations.
        - Merge configuration file values with command-line arguments, prioritizing
            explicit arguments.
        - Validate configuration for required fields and logical consistency.
        - Create a documented sample configuration file.

    Exceptions:
        Raises ConfigurationError for invalid or missing configuration.
        Raises FileOperationError for file creation errors.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def parse_arguments_and_config(self, argv: list[str] | None = None) -> ApplicationConfig:
        """
        Parses command line arguments and configuration file, merges them, and constructs the
            application configuration.

        Explicit arguments win over the configuration file, which wins over the
        dataclass defaults.

        Raises:
            ConfigurationError: If required arguments are missing or configuration is invalid.

        Returns:
            ApplicationConfig: The fully constructed application configuration object.
        """
        args = self._create_argument_parser().parse_args(argv)

        # Handle early exits
        if args.create_config:
            self._create_sample_config(args.create_config)
            sys.exit(Constants.ErrorCodes.SUCCESS)

        config_data = self._load_config_file(getattr(args, "config", None))
        if config_data:
            self._merge_config_with_args(config_data, args)

        app_config = self._build_application_config(args)
        self._validate_configuration(app_config)
        return app_config

    def _create_argument_parser(self) -> argparse.ArgumentParser:
        """
        Creates the argument parser.

        Every option defaults to None so that values missing from the command
        line can be filled from the configuration file.
        """
        parser = argparse.ArgumentParser(
            prog="geo-photo-kml",
            description="Generates a Google Earth KML map from the EXIF GPS data of a photo directory.",
            epilog="Examples:\n"
            "  %(prog)s -s /photos -o trip.kml\n"
            "  %(prog)s -s /photos -o trip.kml --folders-by date --folder-date-pattern %%Y-%%m\n"
            "  %(prog)s -s /photos -o trip.kml --draw-polygon --split-by day -v\n"
            "  %(prog)s --create-config  # Create sample config file\n"
            "  %(prog)s --config my_settings.toml  # Use custom config file\n\n"
            "Configuration files (TOML format) are searched in this order:\n"
            "  1. Path specified with --config\n"
            "  2. ./geo_photo_kml.toml\n"
            "  3. ~/.config/geo_photo_kml/config.toml\n"
            "  4. ~/.geo_photo_kml.toml",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        flag = argparse.BooleanOptionalAction

        parser.add_argument("-s", "--source", help="photo directory or single photo to process")
        parser.add_argument("-o", "--output", help="destination KML file")
        parser.add_argument(
            "-v", "--verbose", action="store_true", default=None, help="print additional information"
        )
        parser.add_argument("--config", type=str, help="Path to TOML configuration file (optional)")
        parser.add_argument(
            "--create-config",
            type=str,
            nargs="?",
            const=Constants.DEFAULT_CONFIG_NAME,
            help="Create a sample configuration file and exit (optionally specify path)",
        )

        source = parser.add_argument_group("source")
        source.add_argument("--file-pattern", help="include glob, default *.jpg")
        source.add_argument("--exclude", help="substrings to exclude, separated by ::")
        source.add_argument("--recursive", action=flag, default=None, help="descend into subdirectories")
        source.add_argument("--follow-links", action=flag, default=None, help="follow symbolic links")
        source.add_argument(
            "--include-null", action=flag, default=None, help="place photos without GPS at the default coordinate"
        )
        source.add_argument("--default-lat", type=float, help="latitude for photos without GPS")
        source.add_argument("--default-lon", type=float, help="longitude for photos without GPS")

        folders = parser.add_argument_group("folders")
        folders.add_argument("--folders-by", choices=[e.value for e in FolderBy], type=str.lower)
        folders.add_argument("--folder-date-pattern", help="strftime pattern for --folders-by date")
        folders.add_argument("--regex", help="folder regex for --folders-by regex")
        folders.add_argument("--regex-default", help="folder used when the regex does not match")
        folders.add_argument("--root-name", help="name of the root folder")
        folders.add_argument("--root-description", help="extra text for the root folder description")

        path = parser.add_argument_group("path")
        path.add_argument("--draw-path", action=flag, default=None, help="draw the travel path")
        path.add_argument("--draw-polygon", action=flag, default=None, help="draw a hull polygon per folder")
        path.add_argument("--path-width", type=float, help="path line width")
        path.add_argument("--split-by", choices=[e.value for e in SplitBy], type=str.lower)

        placemark = parser.add_argument_group("placemark")
        placemark.add_argument("--name-by", choices=[e.value for e in NameBy], type=str.lower)
        placemark.add_argument("--placemark-date-pattern", help="strftime pattern for --name-by date")
        placemark.add_argument("--scale", type=float, help="icon scale")
        placemark.add_argument("--zoom", type=float, help="highlight icon zoom factor")
        placemark.add_argument("--symbol-as-photo", action=flag, default=None, help="use thumbnails as icons")
        placemark.add_argument("--timestamp", action=flag, default=None, help="add placemark timestamps")

        photo = parser.add_argument_group("photo")
        photo.add_argument("--reference", choices=[e.value for e in Reference], type=str.lower)
        photo.add_argument("--base-url", help="base URL for --reference absolute_path")
        photo.add_argument("--width-limit", type=int)
        photo.add_argument("--height-limit", type=int)
        photo.add_argument("--limit-width", action=flag, default=None)
        photo.add_argument("--limit-height", action=flag, default=None)
        photo.add_argument("--lowercase-extension", action=flag, default=None)
        photo.add_argument("--thumbnail-size", type=int)
        photo.add_argument("--border-size", type=int, help="thumbnail border in pixels")
        photo.add_argument("--border-color", help="thumbnail border color, RRGGBB")

        description = parser.add_argument_group("description")
        description.add_argument(
            "--description-mode", choices=[e.value for e in DescriptionMode], type=str.lower
        )
        description.add_argument("--default-to", action=flag, default=None)
        description.add_argument(
            "--default-mode",
            choices=[DescriptionMode.STATIC.value, DescriptionMode.CUSTOM.value],
            type=str.lower,
        )
        for segment in ("photo", "filename", "date", "coordinate", "altitude", "bearing"):
            description.add_argument(
                f"--desc-{segment}", action=flag, default=None, help=f"include the {segment} segment"
            )
        description.add_argument("--custom-description", help="custom description template")
        description.add_argument("--external-file", help="name of the per-directory description file")

        return parser

    def _load_config_file(self, config_path: str | Path | None = None) -> dict:
        """
        Loads configuration data from a TOML file.

        Args:
            config_path (str | Path | None): Optional path to a configuration file. If not provided,
                standard locations are checked.

        Returns:
            dict: The loaded configuration, or an empty dictionary if no file is found.

        Raises:
            ConfigurationError: An explicitly given file is missing or malformed.
        """
        if config_path and not Path(config_path).exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        config_locations = []
        if config_path:
            config_locations.append(Path(config_path))

        config_locations.extend(
            [
                Path.cwd() / Constants.DEFAULT_CONFIG_NAME,
                Path.home() / ".config" / "geo_photo_kml" / "config.toml",
                Path.home() / ".geo_photo_kml.toml",
            ]
        )

        for config_file in config_locations:
            if config_file.exists():
                try:
                    with open(config_file, "rb") as f:
                        config_data = tomllib.load(f)
                    self.logger.info(f"Loaded configuration from: {config_file}")
                    return config_data
                except (OSError, IOError) as e:
                    self.logger.warning(f"Could not load config file {config_file}: {e}")
                    continue
                except tomllib.TOMLDecodeError as e:
                    raise ConfigurationError(f"Could not parse config file {config_file}: {e}") from e

        return {}

    def _merge_config_with_args(self, config_data: dict, args: argparse.Namespace) -> None:
        """Fill every argument left unset on the command line from config_data."""
        for mapping in FIELD_MAPPINGS:
            self._apply_field_mapping(config_data, args, mapping)

    def _apply_field_mapping(
        self, config_data: dict, args: argparse.Namespace, mapping: tuple
    ) -> None:
        """
        Applies a single field mapping from the configuration file to the arguments namespace.

        Merge Strategies:
            - "none_check": Sets the argument if it is None and the config value exists.
            - "enum": Like "none_check", for values that name an enum member.
        """
        toml_section, arg_name, toml_field, merge_strategy = mapping[:4]
        section_data = config_data.get(toml_section, {})

        if merge_strategy in ("none_check", "enum"):
            if getattr(args, arg_name, None) is None and toml_field in section_data:
                setattr(args, arg_name, section_data[toml_field])

    def _build_application_config(self, args: argparse.Namespace) -> ApplicationConfig:
        sections: dict[str, dict] = {name: {} for name in SECTION_TYPES}

        for mapping in FIELD_MAPPINGS:
            toml_section, arg_name, toml_field, merge_strategy = mapping[:4]
            value = getattr(args, arg_name, None)
            if value is None:
                continue
            if merge_strategy == "enum":
                value = self._parse_enum(mapping[4], value, f"{toml_section}.{toml_field}")
            sections[toml_section][toml_field] = value

        return ApplicationConfig(
            **{name: self._create_section(SECTION_TYPES[name], values) for name, values in sections.items()}
        )

    @staticmethod
    def _create_section(section_type, values: dict):
        known = {f.name for f in fields(section_type)}
        unknown = set(values) - known
        if unknown:
            raise ConfigurationError(f"Unknown settings: {', '.join(sorted(unknown))}")
        return section_type(**values)

    @staticmethod
    def _parse_enum(enum_type: type[Enum], value, field_name: str) -> Enum:
        """Accept an enum member, its value or its name, case-insensitively."""
        if isinstance(value, enum_type):
            return value
        text = str(value).strip().lower()
        for member in enum_type:
            if text in (member.value, member.name.lower()):
                return member
        choices = ", ".join(member.value for member in enum_type)
        raise ConfigurationError(f"Invalid value for {field_name}: {value!r}. Use one of {choices}")

    def _create_sample_config(self, output_path: str | Path | None = None) -> None:
        """Creates a documented sample configuration file in TOML format.

        Parameters:
            output_path (str | Path | None): Where to save the file; defaults to
                'geo_photo_kml.toml' in the current working directory.

        Raises:
            FileOperationError: If the configuration file cannot be created.
        """
        output_path = Path(output_path) if output_path else Path.cwd() / Constants.DEFAULT_CONFIG_NAME

        try:
            with open(output_path, "w", encoding="utf-8") as f:
                f.write(SAMPLE_CONFIG)
            self.logger.info(f"Sample configuration file created: {output_path}")
            self.logger.info("Edit this file with your preferred settings.")
        except (OSError, IOError) as e:
            self.logger.error(f"Error creating sample config file: {e}")
            raise FileOperationError(f"Could not create config file: {e}") from e

    def _validate_configuration(self, app_config: ApplicationConfig) -> None:
        """
        Validates the application configuration for required options and constraints.

        Raises:
            ConfigurationError: If any configuration requirement is not met.
        """
        source = app_config.source.directory
        if not source:
            raise ConfigurationError("Source (-s/--source) is required")
        if not Path(source).exists():
            raise ConfigurationError(f"Source does not exist: {source}")

        if not app_config.output.destination:
            raise ConfigurationError("Destination (-o/--output) is required")

        try:
            re.compile(app_config.folders.regex)
        except re.error as e:
            raise ConfigurationError(f"Invalid folder regex {app_config.folders.regex!r}: {e}") from e

        photo = app_config.photo
        for name in ("width_limit", "height_limit", "thumbnail_size"):
            if getattr(photo, name) <= 0:
                raise ConfigurationError(f"{name} must be positive")
        if photo.thumbnail_border_size < 0 or 2 * photo.thumbnail_border_size >= photo.thumbnail_size:
            raise ConfigurationError("thumbnail_border_size must be less than half of thumbnail_size")
        if not re.fullmatch(r"[0-9A-Fa-f]{6}", photo.thumbnail_border_color):
            raise ConfigurationError(
                f"Invalid thumbnail border color {photo.thumbnail_border_color!r}, use RRGGBB"
            )

        if app_config.path.width < 0:
            raise ConfigurationError("Path width must not be negative")

        if app_config.description.default_mode not in (DescriptionMode.STATIC, DescriptionMode.CUSTOM):
            raise ConfigurationError("default_mode must be static or custom")
