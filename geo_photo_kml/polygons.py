"""Convex hull polygons per photo folder."""

import logging

from shapely.geometry import MultiPoint
from shapely.geometry import Polygon as ShapelyPolygon
from shapely.geometry.polygon import orient

from .constants import Constants
from .kml import Folder, LineStyle, Placemark, Point, Polygon, PolyStyle, Style


class PolygonBuilder:
    """
    Mirrors the photo folder tree into a "Polygon" folder holding hull polygons.

    Each mirrored folder collects the points of the placemarks placed directly
    in its real folder. The hull of a folder is hung on the mirror of its
    parent, and the points placed directly under the root get a hull named
    after the polygon folder itself.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self._inputs: dict[Folder, list[tuple[float, float]]] = {}

    def build(self, root: Folder) -> Folder:
        """
        Build the polygon folder for root.

        Args:
            root: The photo root folder, before the path folders are attached.

        Returns:
            The pruned "Polygon" folder.
        """
        self._inputs = {}
        polygon_root = Folder(name=Constants.POLYGON_FOLDER_NAME, open=False)
        self._inputs[polygon_root] = []

        self._walk(root, polygon_root)

        root_points = self._inputs[polygon_root]
        if root_points:
            self._add_polygon(polygon_root.name, root_points, polygon_root)

        return self.prune(polygon_root)

    def _walk(self, folder: Folder, mirror: Folder) -> None:
        for child in folder.folders():
            child_mirror = Folder(name=child.name, open=True)
            mirror.add(child_mirror)
            self._inputs[child_mirror] = []
            self._walk(child, child_mirror)

            child_points = self._inputs[child_mirror]
            if child_points:
                self._add_polygon(child.name, child_points, mirror)

        self._inputs[mirror].extend(
            (placemark.geometry.longitude, placemark.geometry.latitude)
            for placemark in folder.placemarks()
            if isinstance(placemark.geometry, Point)
        )

    def _add_polygon(self, name: str, points: list[tuple[float, float]], parent: Folder) -> None:
        hull = MultiPoint(points).convex_hull
        if not isinstance(hull, ShapelyPolygon) or hull.is_empty:
            self.logger.debug(f"Skipping polygon for {name}: {len(set(points))} distinct points do not span an area")
            return

        ring = tuple((x, y) for x, y in orient(hull, sign=1.0).exterior.coords)
        parent.add(Placemark(
            name=name,
            geometry=Polygon(outer_ring=ring),
            style=Style(
                line=LineStyle(color=Constants.Colors.POLYGON_LINE, width=0.0),
                poly=PolyStyle(color=Constants.Colors.POLYGON_FILL, color_mode="random"),
            ),
        ))

    def prune(self, folder: Folder) -> Folder:
        """
        Drop sub-folders that are empty, in a single pass.

        Emptiness is judged before recursing, so a folder whose only content
        were empty sub-folders is kept. Returns a rebuilt folder; the input is
        left untouched.
        """
        features = []
        for feature in folder.features:
            if isinstance(feature, Folder):
                if not feature.features:
                    continue
                features.append(self.prune(feature))
            else:
                features.append(feature)
        return Folder(name=folder.name, description=folder.description, open=folder.open, features=features)
