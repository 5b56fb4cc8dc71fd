"""Utility classes for the geo photo KML application."""

import logging
import os
import threading
import zlib
from pathlib import Path

from .constants import Constants
from .exceptions import FileOperationError
from .types import RunStatistics


class LoggingSetup:
    """Handles logging configuration."""

    @staticmethod
    def setup_logging(level: int = logging.INFO) -> logging.Logger:
        """Set up logging configuration."""
        logging.basicConfig(
            level=level,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        return logging.getLogger("geo_photo_kml")


class CancellationToken:
    """Cooperative cancellation flag shared between the CLI and a running document."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class PathNormalizer:
    """Handles path normalization across different platforms."""

    @staticmethod
    def to_forward_slashes(path: str) -> str:
        return path.replace('\\', '/')

    @staticmethod
    def get_kml_image_path(image_path: str) -> str:
        """Get an absolute file URL for a local image."""
        normalized = PathNormalizer.to_forward_slashes(os.path.abspath(image_path))
        # Ensure it starts with forward slash
        if not normalized.startswith('/'):
            normalized = '/' + normalized
        return f"file://{normalized}"

    @staticmethod
    def get_relative_path(target: str, kml_file: str) -> str:
        """
        Path of target as seen from the directory holding kml_file.

        Relativizing against the KML file itself yields one parent step too many,
        so the first ``..`` is turned into ``.``.
        """
        relative = os.path.relpath(os.path.abspath(target), os.path.abspath(kml_file))
        return PathNormalizer.to_forward_slashes(relative.replace("..", ".", 1))

    @staticmethod
    def lowercase_extension(path: str) -> str:
        base, ext = os.path.splitext(path)
        return base + ext.lower()

    @staticmethod
    def get_thumbnail_dir(destination: str) -> Path:
        """Directory that holds the thumbnails of a KML file."""
        dest = Path(destination)
        return dest.parent / f"{dest.stem}{Constants.THUMBNAILS_SUFFIX}"


def safe_xml_string(text: str) -> str:
    """Wrap text in a CDATA section when it contains markup characters."""
    if any(c in text for c in "<>&"):
        return f"<![CDATA[{text}]]>"
    return text


def file_crc32(path: str, chunk_size: int = 65536) -> int:
    """CRC32 checksum of a file's bytes."""
    crc = 0
    try:
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(chunk_size), b""):
                crc = zlib.crc32(chunk, crc)
    except OSError as e:
        raise FileOperationError(f"Could not read {path}: {e}") from e
    return crc & 0xFFFFFFFF


class Scaler:
    """Shrinks a dimension to width and height limits, keeping the aspect ratio."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height

    def limit_width(self, limit: int) -> None:
        if self.width > limit:
            self.height = round(self.height * limit / self.width)
            self.width = limit

    def limit_height(self, limit: int) -> None:
        if self.height > limit:
            self.width = round(self.width * limit / self.height)
            self.height = limit

    @property
    def dimension(self) -> tuple[int, int]:
        return self.width, self.height


class PropertiesLoader:
    """
    Reads description files in the Java properties format.

    Keys end at the first unescaped ``=``, ``:`` or whitespace. A line ending
    in an odd number of backslashes continues on the next line, and values may
    use the ``\\t``, ``\\n``, ``\\r``, ``\\f`` and ``\\uXXXX`` escapes.
    """

    SEPARATORS = "=:"
    WHITESPACE = " \t\f"
    ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
    HEX_DIGITS = "0123456789abcdefABCDEF"

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def load(self, path: str | Path) -> dict[str, str]:
        """
        Parse a properties file.

        Lines whose first non-blank character is ``#`` or ``!`` are comments.
        A missing or unreadable file gives an empty mapping.
        """
        path = Path(path)
        if not path.is_file():
            return {}

        try:
            with open(path, "r", encoding="utf-8") as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            self.logger.warning(f"Could not read description file {path}: {e}")
            return {}

        properties: dict[str, str] = {}
        try:
            for line in self._logical_lines(text.split("\n")):
                key, value = self._split(line)
                properties[key] = value
        except ValueError as e:
            self.logger.warning(f"Could not parse description file {path}: {e}")
            return {}

        self.logger.debug(f"Loaded {len(properties)} descriptions from {path}")
        return properties

    def _logical_lines(self, lines: list[str]):
        current = None
        for raw_line in lines:
            line = raw_line.lstrip(self.WHITESPACE)
            if current is None:
                if not line or line[0] in "#!":
                    continue
                current = ""
            trailing = len(line) - len(line.rstrip("\\"))
            if trailing % 2:
                current += line[:-1]
                continue
            yield current + line
            current = None
        if current:
            yield current

    def _split(self, line: str) -> tuple[str, str]:
        index = 0
        while index < len(line):
            char = line[index]
            if char == "\\":
                index += 2
                continue
            if char in self.SEPARATORS or char in self.WHITESPACE:
                break
            index += 1
        key = line[:index]

        rest = line[index:].lstrip(self.WHITESPACE)
        if rest and rest[0] in self.SEPARATORS:
            rest = rest[1:].lstrip(self.WHITESPACE)
        return self._unescape(key), self._unescape(rest)

    def _unescape(self, text: str) -> str:
        if "\\" not in text:
            return text

        chars = []
        index = 0
        while index < len(text):
            char = text[index]
            index += 1
            if char != "\\":
                chars.append(char)
                continue
            if index >= len(text):
                break
            escaped = text[index]
            index += 1
            if escaped == "u":
                digits = text[index:index + 4]
                if len(digits) != 4 or any(c not in self.HEX_DIGITS for c in digits):
                    raise ValueError(f"Malformed \\uxxxx escape: \\u{digits}")
                chars.append(chr(int(digits, 16)))
                index += 4
            else:
                chars.append(self.ESCAPES.get(escaped, escaped))
        return "".join(chars)


class SummaryFormatter:
    """Formats the end of run summary table."""

    ROWS = (
        ("Files", "files"),
        ("EXIF", "exif"),
        ("Coordinates", "gps"),
        ("Placemarks", "placemarks"),
        ("Errors", "errors"),
    )
    TIME_LABEL = "Time"

    def format(self, statistics: RunStatistics) -> str:
        labels = [label for label, _ in self.ROWS] + [self.TIME_LABEL]
        width = max(len(label) for label in labels) + 1

        lines = [
            f"{label.ljust(width)}:{str(getattr(statistics, attr)).rjust(8)}"
            for label, attr in self.ROWS
        ]
        lines.append(f"{self.TIME_LABEL.ljust(width)}:{f'{statistics.elapsed:.3f}'.rjust(8)} s")
        return "\n".join(lines)
