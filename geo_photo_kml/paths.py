"""Travel path and path gap construction."""

import logging

from .constants import Constants
from .kml import Folder, LineString, LineStyle, Placemark, Style
from .types import LineNode, PathConfig, SplitBy

SPLIT_PATTERNS = {
    SplitBy.HOUR: "%Y%m%d%H",
    SplitBy.DAY: "%Y%m%d",
    SplitBy.WEEK: "%Y%W",
    SplitBy.MONTH: "%Y%m",
    SplitBy.YEAR: "%Y",
}


class PathBuilder:
    """Accumulates GPS fixes and turns them into path and gap placemarks."""

    def __init__(self, path_config: PathConfig, logger: logging.Logger):
        self.path_config = path_config
        self.logger = logger
        self.nodes: list[LineNode] = []

    def add(self, node: LineNode) -> None:
        self.nodes.append(node)

    def split_key(self, node: LineNode) -> str:
        pattern = SPLIT_PATTERNS.get(self.path_config.split_by)
        if pattern is None:
            return Constants.NO_SPLIT_KEY
        return node.date.strftime(pattern)

    def bucket(self) -> list[list[LineNode]]:
        """Date-sorted nodes grouped by split key, buckets ordered by key."""
        buckets: dict[str, list[LineNode]] = {}
        for node in sorted(self.nodes, key=lambda n: n.date):
            buckets.setdefault(self.split_key(node), []).append(node)
        return [buckets[key] for key in sorted(buckets)]

    def build(self) -> list[Folder]:
        """
        Build the "Path" and "Path Gap" folders.

        Every bucket holding at least two fixes becomes one path line; every pair
        of adjacent buckets is joined by a gap line from the last fix of the
        first to the first fix of the second. Empty folders are left out, and
        nothing is built with fewer than two fixes or with path drawing off.
        """
        if not self.path_config.draw_path or len(self.nodes) < 2:
            return []

        buckets = self.bucket()
        path_folder = Folder(name=Constants.PATH_FOLDER_NAME)
        gap_folder = Folder(name=Constants.PATH_GAP_FOLDER_NAME)

        for nodes in buckets:
            if len(nodes) > 1:
                path_folder.add(self._line(nodes, Constants.Colors.PATH))

        for previous, current in zip(buckets, buckets[1:]):
            gap_folder.add(self._line([previous[-1], current[0]], Constants.Colors.PATH_GAP))

        self.logger.info(
            f"Path: {len(path_folder.features)} segments, {len(gap_folder.features)} gaps"
        )
        return [folder for folder in (path_folder, gap_folder) if folder.features]

    def _line(self, nodes: list[LineNode], color: str) -> Placemark:
        return Placemark(
            name=self._name(nodes[0], nodes[-1]),
            geometry=LineString(
                coordinates=tuple((n.longitude, n.latitude) for n in nodes),
                extrude=False,
                tessellate=True,
            ),
            style=Style(line=LineStyle(color=color, width=self.path_config.width)),
        )

    @staticmethod
    def _name(first: LineNode, last: LineNode) -> str:
        fmt = Constants.PATH_NAME_DATE_FORMAT
        return f"{first.date.strftime(fmt)} - {last.date.strftime(fmt)}"
