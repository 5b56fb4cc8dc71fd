"""Single-run orchestration from source directory to KML file."""

import logging
import os
import time
from datetime import datetime
from pathlib import Path

from .collector import FileCollector
from .constants import Constants
from .description import DescriptionBuilder
from .exceptions import DirectoryUnwritableError, FileOperationError, GPSGeolocationError, PhotoDataError
from .export import KMLExporter
from .folders import FolderClassifier
from .gps import PhotoInfoExtractor
from .kml import BalloonStyle, Folder, IconStyle, KMLDocument, Placemark, Point, Style, StyleMap
from .paths import PathBuilder
from .polygons import PolygonBuilder
from .thumbnails import ThumbnailGenerator
from .types import ApplicationConfig, LineNode, NameBy, PhotoRecord, RunResult, RunStatistics, RunStatus
from .utils import CancellationToken, PathNormalizer, SummaryFormatter, file_crc32, safe_xml_string


class DocumentAssembler:
    """
    Orchestrates one run: collect, extract, classify, style, serialize.

    Every run gets fresh counters, folder cache, path nodes and output tree, so an
    assembler can be reused for several configurations.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.exporter = KMLExporter(logger)
        self.summary_formatter = SummaryFormatter()

    def run(self, app_config: ApplicationConfig, token: CancellationToken | None = None) -> RunResult:
        """
        Run the whole pipeline for app_config.

        Args:
            app_config: Validated application configuration.
            token: Optional cancellation token, checked between files.

        Returns:
            RunResult. COMPLETED when the KML was written, EMPTY when no files
            matched, ABORTED on cancellation or an unwritable thumbnail
            directory, FAILED when the destination could not be written.
        """
        started = time.perf_counter()
        stats = RunStatistics()
        token = token or CancellationToken()
        destination = app_config.output.destination

        document = KMLDocument(name=Path(destination).stem if destination else "", open=True)
        root = self._create_root_folder(app_config)
        document.features.append(root)

        collection = FileCollector(app_config.source, self.logger).collect(token)
        if collection.interrupted:
            return self._finish(RunStatus.ABORTED, stats, started, destination, message="Interrupted")
        if not collection.files:
            return self._finish(RunStatus.EMPTY, stats, started, destination, message="No files found")

        thumbnails = None
        if app_config.uses_thumbnails:
            try:
                thumbnails = self._create_thumbnail_generator(app_config)
            except DirectoryUnwritableError as e:
                self.logger.error(str(e))
                return self._finish(RunStatus.ABORTED, stats, started, destination, message=str(e))

        state = _RunState(app_config, root, document, thumbnails, self.logger)

        total = len(collection.files)
        for index, file_path in enumerate(collection.files, 1):
            if token.cancelled:
                self.logger.info("Run interrupted by user")
                return self._finish(RunStatus.ABORTED, stats, started, destination, message="Interrupted")

            stats.files += 1
            self.logger.info(f"[{index}/{total}] {file_path}")
            try:
                state.add_photo(file_path, stats)
            except PhotoDataError as e:
                stats.errors += 1
                self.logger.warning(f"Skipping {file_path}: {e}")
            except FileOperationError as e:
                stats.errors += 1
                self.logger.warning(str(e))

        if app_config.path.draw_polygon:
            root.add(PolygonBuilder(self.logger).build(root))

        root.features.extend(state.path_builder.build())

        try:
            kml = self.exporter.write(document, destination)
        except FileOperationError as e:
            return self._finish(RunStatus.FAILED, stats, started, destination, message=str(e))

        return self._finish(RunStatus.COMPLETED, stats, started, destination, kml=kml)

    def _create_root_folder(self, app_config: ApplicationConfig) -> Folder:
        made_with = f"<p>Made with {Constants.APP_NAME}, {datetime.now():%Y-%m-%d %H:%M:%S}</p>"
        extra = app_config.folders.root_description.replace("\n", "<br />")
        return Folder(
            name=app_config.folders.root_name,
            description=safe_xml_string(made_with + extra),
            open=True,
        )

    def _create_thumbnail_generator(self, app_config: ApplicationConfig) -> ThumbnailGenerator:
        thumbnail_dir = PathNormalizer.get_thumbnail_dir(app_config.output.destination)
        try:
            thumbnail_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryUnwritableError(f"Could not create thumbnail directory {thumbnail_dir}: {e}") from e
        if not os.access(thumbnail_dir, os.W_OK):
            raise DirectoryUnwritableError(f"Insufficient privileges to write to {thumbnail_dir}")

        self.logger.debug(f"Thumbnail directory: {thumbnail_dir}")
        return ThumbnailGenerator(app_config.photo, thumbnail_dir, self.logger)

    def _finish(self, status, stats, started, destination, kml=None, message="") -> RunResult:
        stats.elapsed = time.perf_counter() - started
        summary = self.summary_formatter.format(stats)
        log = self.logger.info if status is RunStatus.COMPLETED else self.logger.warning
        log(f"Run {status.value}{': ' + message if message else ''}\n{summary}")
        return RunResult(
            status=status,
            statistics=stats,
            destination=destination,
            kml=kml,
            summary=summary,
            message=message,
        )


class _RunState:
    """Per-run accumulators shared by the per-photo steps."""

    def __init__(self, app_config, root, document, thumbnails, logger):
        self.app_config = app_config
        self.document = document
        self.thumbnails: ThumbnailGenerator | None = thumbnails
        self.logger = logger

        source = app_config.source.directory
        source_dir = os.path.dirname(os.path.abspath(source)) if os.path.isfile(source) else source

        self.extractor = PhotoInfoExtractor(app_config.source, logger)
        self.classifier = FolderClassifier(app_config.folders, source_dir, root, logger)
        self.path_builder = PathBuilder(app_config.path, logger)
        self.description_builder = DescriptionBuilder(app_config, self.extractor, logger)
        self.balloon = BalloonStyle(
            id=Constants.BALLOON_STYLE_ID,
            bg_color=Constants.Colors.BALLOON_BACKGROUND,
            text_color=Constants.Colors.BALLOON_TEXT,
            text="$[description]",
        )
        self._style_ids: set[str] = set()

    def add_photo(self, file_path: str, stats: RunStatistics) -> None:
        """Count a photo and attach its placemark when it qualifies."""
        try:
            record: PhotoRecord = self.extractor.extract(file_path)
        except GPSGeolocationError:
            # the photo did carry EXIF, only its GPS directory was unusable
            stats.exif += 1
            raise
        stats.exif += 1
        if record.has_location:
            stats.gps += 1

        if record.has_location and self.app_config.path.draw_path:
            self.path_builder.add(LineNode(record.date, record.latitude, record.longitude))

        if not (record.has_location or self.app_config.source.include_null_coordinate):
            return

        folder = self.classifier.classify(file_path, record.date)
        crc = file_crc32(file_path)
        style_map_id = self._add_styles(crc)

        thumbnail_path = None
        if self.thumbnails is not None:
            thumbnail_path = self.thumbnails.create(file_path, f"{crc:08x}")

        placemark = Placemark(
            name=self._placemark_name(file_path, record),
            snippet="",
            description=self.description_builder.build(record, thumbnail_path),
            geometry=Point(record.longitude, record.latitude, 0.0),
            style_url=f"#{style_map_id}",
        )
        if self.app_config.placemark.timestamp:
            placemark.timestamp = record.date.astimezone().isoformat(timespec="seconds")

        folder.add(placemark)
        stats.placemarks += 1

    def _add_styles(self, crc: int) -> str:
        normal_id = Constants.STYLE_NORMAL_ID.format(crc=crc)
        highlight_id = Constants.STYLE_HIGHLIGHT_ID.format(crc=crc)
        style_map_id = Constants.STYLE_MAP_ID.format(crc=crc)
        if style_map_id in self._style_ids:
            return style_map_id
        self._style_ids.add(style_map_id)

        placemark_config = self.app_config.placemark
        normal_icon = IconStyle(scale=Constants.NORMAL_ICON_SCALE)
        highlight_icon = IconStyle(scale=Constants.HIGHLIGHT_ICON_SCALE)
        if placemark_config.symbol_as_photo:
            thumbnail_dir = PathNormalizer.get_thumbnail_dir(self.app_config.output.destination)
            href = f"{thumbnail_dir.name}/{crc:08x}.jpg"
            normal_icon = IconStyle(href=href, scale=placemark_config.scale)
            highlight_icon = IconStyle(href=href, scale=placemark_config.zoom * placemark_config.scale)

        self.document.styles.append(Style(id=normal_id, icon=normal_icon))
        self.document.styles.append(Style(id=highlight_id, icon=highlight_icon, balloon=self.balloon))
        self.document.style_maps.append(
            StyleMap(id=style_map_id, normal_url=f"#{normal_id}", highlight_url=f"#{highlight_id}")
        )
        return style_map_id

    def _placemark_name(self, file_path: str, record: PhotoRecord) -> str:
        name_by = self.app_config.placemark.name_by
        if name_by is NameBy.FILE:
            return Path(file_path).stem
        if name_by is NameBy.DATE:
            try:
                return record.date.strftime(self.app_config.placemark.date_pattern)
            except (ValueError, TypeError):
                return Constants.INVALID_DATE_NAME
        return ""
