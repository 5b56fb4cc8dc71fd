"""GPS data processing and image metadata extraction."""

import logging
import os
import struct
from datetime import datetime

import piexif
from PIL import Image

from .constants import Constants
from .exceptions import GPSGeolocationError, ImageDecodeError, NoExifError
from .types import PhotoRecord, SourceConfig


class PhotoInfoExtractor:
    """Handles GPS, date and orientation extraction from photo EXIF data."""

    def __init__(self, source_config: SourceConfig, logger: logging.Logger):
        self.source_config = source_config
        self.logger = logger

    def extract(self, image_path: str) -> PhotoRecord:
        """
        Extract the metadata of a single photo.

        Args:
            image_path: Full path to the image file

        Returns:
            PhotoRecord; photos without a GPS fix, or with the (0, 0) fix, carry
            the configured default coordinate and is_zero_coordinate=True.

        Raises:
            NoExifError: The file holds no EXIF data or is not an EXIF container.
            GPSGeolocationError: A GPS directory exists without a usable location.
            ImageDecodeError: The file could not be read.
        """
        exif_dict = self._load_exif(image_path)

        if not any(exif_dict.get(ifd) for ifd in ("0th", "Exif", "GPS")):
            raise NoExifError(f"No EXIF data in {image_path}")

        record = PhotoRecord(
            path=image_path,
            date=self._extract_date_taken(exif_dict, image_path),
            latitude=self._truncate(self.source_config.default_lat),
            longitude=self._truncate(self.source_config.default_lon),
            orientation=self._extract_orientation(exif_dict),
        )

        gps_info = exif_dict.get("GPS") or {}
        if not gps_info:
            self.logger.debug(f"No GPS data in {os.path.basename(image_path)}")
            return record

        record.has_gps = True
        latitude, longitude = self._get_decimal_coords(gps_info, image_path)
        if latitude == 0 and longitude == 0:
            self.logger.debug(f"Zero coordinate in {os.path.basename(image_path)}")
            return record

        record.is_zero_coordinate = False
        record.latitude = self._truncate(latitude)
        record.longitude = self._truncate(longitude)
        record.altitude = self._extract_altitude(gps_info)
        record.bearing = self._rational(gps_info.get(piexif.GPSIFD.GPSDestBearing))
        return record

    def get_dimension(self, record: PhotoRecord) -> tuple[int, int]:
        """Pixel size of the stored image, read once and cached on the record."""
        if record.dimension is None:
            try:
                with Image.open(record.path) as img:
                    record.dimension = img.size
            except (OSError, ValueError, Image.DecompressionBombError) as e:
                error = ImageDecodeError(f"Could not decode {record.path}: {e}")
                self.logger.warning(f"{error}, using {Constants.DEFAULT_DIMENSION}")
                record.dimension = Constants.DEFAULT_DIMENSION
        return record.dimension

    def _load_exif(self, image_path: str) -> dict:
        try:
            return piexif.load(image_path)
        except (piexif.InvalidImageDataError, ValueError, struct.error) as e:
            raise NoExifError(f"Invalid EXIF container {image_path}: {e}") from e
        except OSError as e:
            raise ImageDecodeError(f"Error reading {image_path}: {e}") from e

    def _get_decimal_coords(self, gps_info: dict, image_path: str) -> tuple[float, float]:
        """
        Convert the GPS directory latitude and longitude to decimal degrees.

        Args:
            gps_info: The piexif GPS IFD
            image_path: Path used in error messages

        Returns:
            Tuple containing (latitude, longitude) in decimal degrees format
        """
        lat = gps_info.get(piexif.GPSIFD.GPSLatitude)
        lat_ref = gps_info.get(piexif.GPSIFD.GPSLatitudeRef, b'N')
        lon = gps_info.get(piexif.GPSIFD.GPSLongitude)
        lon_ref = gps_info.get(piexif.GPSIFD.GPSLongitudeRef, b'E')

        lat_decimal = self._convert_dms_to_decimal(lat)
        lon_decimal = self._convert_dms_to_decimal(lon)
        if lat_decimal is None or lon_decimal is None:
            raise GPSGeolocationError(f"GPS data without geolocation in {image_path}")

        # Apply negative sign for South and West
        if lat_ref in (b'S', 'S'):
            lat_decimal = -lat_decimal
        if lon_ref in (b'W', 'W'):
            lon_decimal = -lon_decimal

        return lat_decimal, lon_decimal

    def _convert_dms_to_decimal(self, dms) -> float | None:
        """
        Convert rational degrees, minutes, seconds to decimal degrees.

        Args:
            dms: Three (numerator, denominator) pairs

        Returns:
            The decimal degree equivalent of the DMS values, or None if invalid
        """
        if not dms or len(dms) < 3:
            return None
        try:
            return (
                dms[0][0] / dms[0][1]
                + dms[1][0] / (dms[1][1] * 60)
                + dms[2][0] / (dms[2][1] * 3600)
            )
        except (TypeError, IndexError, ZeroDivisionError):
            return None

    def _extract_date_taken(self, exif_dict: dict, image_path: str) -> datetime:
        """Capture date from DateTimeOriginal, or the file modification time."""
        raw = exif_dict.get("Exif", {}).get(piexif.ExifIFD.DateTimeOriginal)
        if raw:
            try:
                value = raw.decode("ascii") if isinstance(raw, bytes) else str(raw)
                return datetime.strptime(value.strip("\x00 "), Constants.EXIF_DATE_FORMAT)
            except (UnicodeDecodeError, ValueError):
                self.logger.debug(f"Unparsable DateTimeOriginal in {image_path}: {raw!r}")
        return datetime.fromtimestamp(os.path.getmtime(image_path))

    def _extract_orientation(self, exif_dict: dict) -> int:
        orientation = exif_dict.get("0th", {}).get(piexif.ImageIFD.Orientation, 1)
        return orientation if isinstance(orientation, int) else 1

    def _extract_altitude(self, gps_info: dict) -> float | None:
        altitude = self._rational(gps_info.get(piexif.GPSIFD.GPSAltitude))
        if altitude is not None and gps_info.get(piexif.GPSIFD.GPSAltitudeRef) == 1:
            altitude = -altitude
        return altitude

    @staticmethod
    def _rational(value) -> float | None:
        try:
            return value[0] / value[1]
        except (TypeError, IndexError, ZeroDivisionError):
            return None

    @staticmethod
    def _truncate(value: float) -> float:
        return int(value * Constants.COORDINATE_PRECISION) / Constants.COORDINATE_PRECISION
