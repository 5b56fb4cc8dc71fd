"""Tests for the export module.

These tests verify KML serialization of the document tree.
They serve as documentation for the generated XML structure.
"""

import pytest
from lxml import etree

from geo_photo_kml.constants import Constants
from geo_photo_kml.exceptions import FileOperationError
from geo_photo_kml.export import KMLExporter
from geo_photo_kml.kml import (
    BalloonStyle, Folder, IconStyle, KMLDocument, LineString, LineStyle, Placemark,
    Point, Polygon, PolyStyle, Style, StyleMap
)

NS = {"k": Constants.KML_NAMESPACE}


class TestKMLExporter:
    """Test suite for KMLExporter class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.document = KMLDocument(name="trip")
        self.document.styles.append(Style(id="s_0000abcd", icon=IconStyle(href="trip-thumbnails/0000abcd.jpg", scale=3.0)))
        self.document.styles.append(Style(
            id="s_0000abcd_hl",
            icon=IconStyle(scale=1.1),
            balloon=BalloonStyle(id="BalloonStyleId", bg_color="ff272420", text_color="ffeeeeee", text="$[description]"),
        ))
        self.document.style_maps.append(StyleMap(id="m_0000abcd", normal_url="#s_0000abcd", highlight_url="#s_0000abcd_hl"))

        root = Folder(name="Photos & friends", description="<![CDATA[<p>Made with</p>]]>", open=True)
        root.add(Placemark(
            name="IMG_0001",
            snippet="",
            description="<![CDATA[<h2>IMG_0001.jpg</h2>]]>",
            geometry=Point(11.97, 57.7),
            timestamp="2024-01-15T10:30:00+01:00",
            style_url="#m_0000abcd",
        ))
        path = Folder(name="Path")
        path.add(Placemark(
            name="segment",
            geometry=LineString(((11.0, 57.0), (12.0, 58.0))),
            style=Style(line=LineStyle(color="ff0000ff", width=2.0)),
        ))
        root.add(path)
        root.add(Placemark(
            name="hull",
            geometry=Polygon(((0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 0.0))),
            style=Style(line=LineStyle(color="00000000", width=0.0), poly=PolyStyle(color="ccffffff", color_mode="random")),
        ))
        self.document.features.append(root)

    @pytest.mark.unit
    def test_cdata_survives_serialization(self, mock_logger):
        """
        Test CDATA handling.

        This test documents that CDATA sections come out literally after
        the entity fix-up, so balloon HTML is not escaped.
        """
        kml = KMLExporter(mock_logger).to_string(self.document)

        assert "<description><![CDATA[<h2>IMG_0001.jpg</h2>]]></description>" in kml
        assert "<name><![CDATA[Photos & friends]]></name>" not in kml
        assert "<name><![CDATA[Photos &amp; friends]]></name>" in kml
        assert "&lt;" not in kml and "&gt;" not in kml

    @pytest.mark.unit
    def test_document_structure(self, mock_logger):
        """
        Test the generated XML tree.

        This test documents the namespace, the document level styles and
        the placemark children.
        """
        kml = KMLExporter(mock_logger).to_string(self.document)
        tree = etree.fromstring(kml.encode("utf-8"))

        assert tree.tag == f"{{{Constants.KML_NAMESPACE}}}kml"
        document = tree.find("k:Document", NS)
        assert document.findtext("k:open", namespaces=NS) == "1"
        assert [s.get("id") for s in document.findall("k:Style", NS)] == ["s_0000abcd", "s_0000abcd_hl"]
        assert document.find("k:Style/k:IconStyle/k:Icon/k:href", NS).text == "trip-thumbnails/0000abcd.jpg"
        assert document.find("k:Style/k:BalloonStyle", NS).get("id") == "BalloonStyleId"

        style_map = document.find("k:StyleMap", NS)
        assert style_map.get("id") == "m_0000abcd"
        assert [p.findtext("k:key", namespaces=NS) for p in style_map.findall("k:Pair", NS)] == ["normal", "highlight"]

        placemark = document.find("k:Folder/k:Placemark", NS)
        assert placemark.findtext("k:Snippet", namespaces=NS) in ("", None)
        assert placemark.findtext("k:Point/k:coordinates", namespaces=NS) == "11.97,57.7,0"
        assert placemark.findtext("k:TimeStamp/k:when", namespaces=NS) == "2024-01-15T10:30:00+01:00"
        assert placemark.findtext("k:styleUrl", namespaces=NS) == "#m_0000abcd"

    @pytest.mark.unit
    def test_line_and_polygon_geometry(self, mock_logger):
        kml = KMLExporter(mock_logger).to_string(self.document)
        tree = etree.fromstring(kml.encode("utf-8"))

        line = tree.find(".//k:LineString", NS)
        assert line.findtext("k:tessellate", namespaces=NS) == "1"
        assert line.findtext("k:extrude", namespaces=NS) == "0"
        assert line.findtext("k:coordinates", namespaces=NS) == "11.0,57.0 12.0,58.0"

        ring = tree.find(".//k:Polygon/k:outerBoundaryIs/k:LinearRing/k:coordinates", NS)
        assert ring.text == "0.0,0.0 1.0,0.0 1.0,1.0 0.0,0.0"
        assert tree.findtext(".//k:PolyStyle/k:colorMode", namespaces=NS) == "random"

    @pytest.mark.unit
    def test_write_creates_file(self, temp_dir, mock_logger):
        destination = temp_dir / "nested" / "trip.kml"

        kml = KMLExporter(mock_logger).write(self.document, destination)

        assert destination.read_text(encoding="utf-8") == kml
        assert kml.startswith("<?xml")

    @pytest.mark.unit
    def test_write_failure_raises_file_operation_error(self, temp_dir, mock_logger):
        blocker = temp_dir / "blocker"
        blocker.write_text("a file, not a directory")

        with pytest.raises(FileOperationError):
            KMLExporter(mock_logger).write(self.document, blocker / "trip.kml")
        mock_logger.error.assert_called_once()
