"""Custom exceptions for the geo photo KML application."""


class GeoPhotoKMLError(Exception):
    """Base exception for geo photo KML operations."""
    pass


class ConfigurationError(GeoPhotoKMLError):
    """Raised when there are configuration-related errors."""
    pass


class PhotoDataError(GeoPhotoKMLError):
    """Raised when a single photo cannot be turned into a placemark."""
    pass


class NoExifError(PhotoDataError):
    """Raised when a photo carries no EXIF metadata."""
    pass


class GPSGeolocationError(PhotoDataError):
    """Raised when a GPS directory is present but holds no usable location."""
    pass


class ImageDecodeError(PhotoDataError):
    """Raised when image pixels cannot be decoded or a thumbnail cannot be written."""
    pass


class DirectoryUnwritableError(GeoPhotoKMLError):
    """Raised when the thumbnail directory cannot be created or written to."""
    pass


class FileOperationError(GeoPhotoKMLError):
    """Raised when file operations fail."""
    pass
