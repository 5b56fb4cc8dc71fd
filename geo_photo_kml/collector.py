"""Source tree walking and file selection."""

import fnmatch
import logging
import os
from dataclasses import dataclass, field

from .types import SourceConfig
from .utils import CancellationToken


@dataclass
class CollectionResult:
    """Files selected from the source, and whether the walk was cancelled."""
    files: list[str] = field(default_factory=list)
    interrupted: bool = False


class FileCollector:
    """Walks the source directory applying the include glob and exclude substrings."""

    def __init__(self, source_config: SourceConfig, logger: logging.Logger):
        self.source_config = source_config
        self.logger = logger
        self._excludes = [os.path.normcase(p) for p in source_config.exclude_patterns]
        self._pattern = source_config.file_pattern.lower()

    def collect(self, token: CancellationToken | None = None) -> CollectionResult:
        """
        Collect the files to process.

        A single file given as the source is accepted when its name matches the
        include glob. For a directory the walk descends recursively or one level
        depending on configuration, pruning excluded subtrees. The result is
        sorted by path.

        Args:
            token: Optional cancellation token checked between files.

        Returns:
            CollectionResult with the sorted file list, or interrupted=True.
        """
        source = self.source_config.directory
        result = CollectionResult()

        if source and os.path.isfile(source):
            if self._matches(source):
                result.files.append(os.path.abspath(source))
            return result

        if not source or not os.path.isdir(source):
            self.logger.error(f"Source directory does not exist: {source}")
            return result

        self.logger.info(f"Scanning directory: {source}")
        for dirpath, dirnames, filenames in os.walk(
            os.path.abspath(source),
            followlinks=self.source_config.follow_links,
            onerror=self._on_walk_error,
        ):
            if not self.source_config.recursive:
                dirnames.clear()
            else:
                # prune in place so excluded subtrees are never entered
                dirnames[:] = [
                    d for d in dirnames if not self._is_excluded(os.path.join(dirpath, d))
                ]

            for filename in filenames:
                if token is not None and token.cancelled:
                    self.logger.info("File collection interrupted")
                    result.interrupted = True
                    return result

                file_path = os.path.join(dirpath, filename)
                if self._matches(file_path):
                    result.files.append(file_path)

        if result.files:
            result.files.sort()
            self.logger.info(f"Found {len(result.files)} files matching {self.source_config.file_pattern}")
        else:
            self.logger.info("File list is empty")

        return result

    def _matches(self, file_path: str) -> bool:
        if not fnmatch.fnmatchcase(os.path.basename(file_path).lower(), self._pattern):
            return False
        if self._is_excluded(file_path):
            self.logger.debug(f"Excluded: {file_path}")
            return False
        return True

    def _is_excluded(self, path: str) -> bool:
        normalized = os.path.normcase(os.path.abspath(path))
        return any(pattern in normalized for pattern in self._excludes)

    def _on_walk_error(self, error: OSError) -> None:
        self.logger.warning(f"Could not list directory {error.filename}: {error}")
