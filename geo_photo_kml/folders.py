"""Folder classification of photos."""

import logging
import os
import re
from datetime import datetime

from .kml import Folder
from .types import FolderBy, FolderConfig
from .utils import PathNormalizer


class FolderClassifier:
    """
    Maps a photo to a node of the folder hierarchy.

    Keys are split on ``/`` into levels; every level is created lazily under its
    parent and cached by its cumulative path, so the same key always yields the
    same Folder instance.
    """

    def __init__(self, folder_config: FolderConfig, source_dir: str, root: Folder, logger: logging.Logger):
        self.folder_config = folder_config
        self.source_dir = os.path.abspath(source_dir)
        self.root = root
        self.logger = logger
        self._pattern = re.compile(folder_config.regex) if folder_config.folders_by is FolderBy.REGEX else None
        self._cache: dict[str, Folder] = {}

    def classify(self, file_path: str, date: datetime) -> Folder:
        key = self.folder_key(file_path, date)
        if key is None:
            return self.root
        return self._get_folder(key)

    def folder_key(self, file_path: str, date: datetime) -> str | None:
        """The raw classification key, or None for the root folder."""
        parent = os.path.dirname(os.path.abspath(file_path))
        folders_by = self.folder_config.folders_by

        if folders_by is FolderBy.DIR:
            relative = os.path.relpath(parent, self.source_dir)
            return None if relative == os.curdir else relative

        if folders_by is FolderBy.DATE:
            return date.strftime(self.folder_config.date_pattern)

        if folders_by is FolderBy.REGEX:
            match = self._pattern.search(parent)
            return match.group(0) if match else self.folder_config.regex_default

        return None

    def _get_folder(self, key: str) -> Folder:
        levels = [level for level in PathNormalizer.to_forward_slashes(key).split("/") if level]
        if not levels:
            return self.root

        parent = self.root
        cumulative = ""
        for level in levels:
            cumulative = f"{cumulative}/{level}"
            folder = self._cache.get(cumulative)
            if folder is None:
                folder = Folder(name=level)
                parent.add(folder)
                self._cache[cumulative] = folder
                self.logger.debug(f"Created folder {cumulative}")
            parent = folder

        return parent
