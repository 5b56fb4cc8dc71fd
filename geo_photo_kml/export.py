"""KML serialization of the in-memory document tree."""

import logging
from pathlib import Path

from lxml import etree
from lxml.builder import ElementMaker

from .constants import Constants
from .exceptions import FileOperationError
from .kml import Folder, KMLDocument, LineString, Placemark, Point, Polygon, Style, StyleMap
from .utils import safe_xml_string

KML = ElementMaker(namespace=Constants.KML_NAMESPACE, nsmap={None: Constants.KML_NAMESPACE})


def _bool(value: bool) -> str:
    return "1" if value else "0"


def _coordinates(pairs) -> str:
    return " ".join(f"{lon},{lat}" for lon, lat in pairs)


class KMLExporter:
    """
    Handles KML export functionality.

    Names are made CDATA safe here; descriptions arrive already prepared by
    their producers. lxml escapes the CDATA markers, so after serialization
    ``&lt;`` and ``&gt;`` are turned back into literal brackets.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def to_string(self, document: KMLDocument) -> str:
        root = KML.kml(self._document(document))
        xml = etree.tostring(root, xml_declaration=True, encoding="UTF-8", pretty_print=True)
        return self._fix_cdata(xml.decode("utf-8"))

    def write(self, document: KMLDocument, destination: str | Path) -> str:
        """Serialize document into destination and return the KML text."""
        kml_content = self.to_string(document)
        kml_path = Path(destination)
        try:
            kml_path.parent.mkdir(parents=True, exist_ok=True)
            with open(kml_path, "w", encoding="utf-8") as f:
                f.write(kml_content)
        except (OSError, IOError) as e:
            self.logger.error(f"Error writing KML file: {e}")
            raise FileOperationError(f"Could not write {kml_path}: {e}") from e

        self.logger.info(f"KML file created: {kml_path}")
        return kml_content

    @staticmethod
    def _fix_cdata(kml_content: str) -> str:
        return kml_content.replace("&lt;", "<").replace("&gt;", ">")

    def _document(self, document: KMLDocument):
        children = []
        if document.name:
            children.append(KML.name(safe_xml_string(document.name)))
        children.append(KML.open(_bool(document.open)))
        children.extend(self._style(style) for style in document.styles)
        children.extend(self._style_map(style_map) for style_map in document.style_maps)
        children.extend(self._feature(feature) for feature in document.features)
        return KML.Document(*children)

    def _feature(self, feature):
        if isinstance(feature, Folder):
            return self._folder(feature)
        return self._placemark(feature)

    def _folder(self, folder: Folder):
        children = [KML.name(safe_xml_string(folder.name)), KML.open(_bool(folder.open))]
        if folder.description:
            children.append(KML.description(folder.description))
        children.extend(self._feature(feature) for feature in folder.features)
        return KML.Folder(*children)

    def _placemark(self, placemark: Placemark):
        children = [KML.name(safe_xml_string(placemark.name))]
        if placemark.snippet is not None:
            children.append(KML.Snippet(placemark.snippet))
        if placemark.description:
            children.append(KML.description(placemark.description))
        if placemark.timestamp:
            children.append(KML.TimeStamp(KML.when(placemark.timestamp)))
        if placemark.style_url:
            children.append(KML.styleUrl(placemark.style_url))
        if placemark.style is not None:
            children.append(self._style(placemark.style))
        if placemark.geometry is not None:
            children.append(self._geometry(placemark.geometry))
        return KML.Placemark(*children)

    def _geometry(self, geometry):
        if isinstance(geometry, Point):
            return KML.Point(
                KML.coordinates(f"{geometry.longitude},{geometry.latitude},{geometry.altitude:g}")
            )
        if isinstance(geometry, LineString):
            return KML.LineString(
                KML.extrude(_bool(geometry.extrude)),
                KML.tessellate(_bool(geometry.tessellate)),
                KML.coordinates(_coordinates(geometry.coordinates)),
            )
        if isinstance(geometry, Polygon):
            return KML.Polygon(
                KML.outerBoundaryIs(
                    KML.LinearRing(KML.coordinates(_coordinates(geometry.outer_ring)))
                )
            )
        raise TypeError(f"Unsupported geometry: {geometry!r}")

    def _style(self, style: Style):
        children = []
        if style.icon is not None:
            icon_children = [KML.scale(str(style.icon.scale))]
            if style.icon.href:
                icon_children.append(KML.Icon(KML.href(style.icon.href)))
            children.append(KML.IconStyle(*icon_children))
        if style.line is not None:
            children.append(KML.LineStyle(KML.color(style.line.color), KML.width(str(style.line.width))))
        if style.poly is not None:
            children.append(KML.PolyStyle(KML.color(style.poly.color), KML.colorMode(style.poly.color_mode)))
        if style.balloon is not None:
            children.append(KML.BalloonStyle(
                KML.bgColor(style.balloon.bg_color),
                KML.textColor(style.balloon.text_color),
                KML.text(style.balloon.text),
                id=style.balloon.id,
            ))

        attributes = {"id": style.id} if style.id else {}
        return KML.Style(*children, **attributes)

    def _style_map(self, style_map: StyleMap):
        return KML.StyleMap(
            KML.Pair(KML.key("normal"), KML.styleUrl(style_map.normal_url)),
            KML.Pair(KML.key("highlight"), KML.styleUrl(style_map.highlight_url)),
            id=style_map.id,
        )
