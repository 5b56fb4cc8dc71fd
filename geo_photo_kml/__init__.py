"""
Geo Photo KML - A Python tool for mapping GPS-tagged photos in Google Earth.

This package provides functionality to:
- Walk a photo directory with include and exclude rules
- Extract EXIF date and GPS positions from photos
- Group placemarks into folders by directory, date or regex
- Draw the travel path and per-folder hull polygons
- Write bordered thumbnails and a KML 2.2 document
"""

__version__ = "1.0.0"
__author__ = "stbrie"

from .main import main

__all__ = ["main"]
