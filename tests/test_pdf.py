"""Tests for PDF assembly from rasterized pages."""

import re

import pytest
from PIL import Image

from sonata.core import DocumentAssemblyError
from sonata.output import PageImage, PdfObjectWriter, assemble_pdf, write_pdf

XREF_ENTRY = re.compile(rb"^(\d{10}) (\d{5}) ([fn]) $")


def fake_page(width=960, height=1248, data=b"\xff\xd8fake-jpeg\xff\xd9"):
    return PageImage(data=data, width=width, height=height)


def read_xref(document: bytes):
    """Return (declared size, entries) of the document's xref table."""
    startxref = int(document.rsplit(b"startxref\n", 1)[1].split(b"\n")[0])
    lines = document[startxref:].split(b"\n")
    assert lines[0] == b"xref"
    first, size = map(int, lines[1].split())
    assert first == 0
    entries = [XREF_ENTRY.match(line).groups() for line in lines[2 : 2 + size]]
    return size, entries


class TestAssemblePdf:
    @pytest.mark.parametrize("n_pages", [1, 2, 5])
    def test_xref_entry_count(self, n_pages):
        document = assemble_pdf([fake_page() for _ in range(n_pages)])
        size, entries = read_xref(document)

        assert size == 2 + 3 * n_pages + 1
        assert len(entries) == size
        assert entries[0] == (b"0000000000", b"65535", b"f")

    @pytest.mark.parametrize("n_pages", [1, 3])
    def test_offsets_point_at_objects(self, n_pages):
        document = assemble_pdf([fake_page() for _ in range(n_pages)])
        _, entries = read_xref(document)

        for obj_id, (offset, generation, kind) in enumerate(entries[1:], start=1):
            assert kind == b"n"
            assert generation == b"00000"
            marker = f"{obj_id} 0 obj".encode()
            assert document[int(offset) : int(offset) + len(marker)] == marker

    def test_header_and_trailer(self):
        document = assemble_pdf([fake_page()])

        assert document.startswith(b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n")
        assert b"trailer\n<< /Size 6 /Root 1 0 R >>" in document
        assert document.endswith(b"%%EOF")

    def test_page_tree(self):
        document = assemble_pdf([fake_page(), fake_page()])
        assert b"<< /Type /Pages /Count 2 /Kids [3 0 R 6 0 R] >>" in document
        assert b"<< /Type /Catalog /Pages 2 0 R >>" in document

    def test_page_size_in_points(self):
        document = assemble_pdf([fake_page(width=960, height=1248)])

        # 96 px per inch, 72 points per inch
        assert b"/MediaBox [0 0 720.00 936.00]" in document
        assert b"q\n720.00 0 0 936.00 0 0 cm\n/Im1 Do\nQ\n" in document
        assert b"/Width 960 /Height 1248" in document

    def test_image_bytes_embedded(self):
        data = b"\xff\xd8" + bytes(range(256)) + b"\xff\xd9"
        document = assemble_pdf([fake_page(data=data)])

        assert f"/Length {len(data)} >>\nstream\n".encode() + data + b"\nendstream\n" in document
        assert b"/Filter /DCTDecode" in document

    def test_no_pages(self):
        with pytest.raises(DocumentAssemblyError, match="No pages"):
            assemble_pdf([])

    def test_empty_image_data(self):
        with pytest.raises(DocumentAssemblyError, match="Page 2 has no image data"):
            assemble_pdf([fake_page(), fake_page(data=b"")])

    @pytest.mark.parametrize("width, height", [(0, 100), (100, 0), (-5, 100)])
    def test_invalid_dimensions(self, width, height):
        with pytest.raises(DocumentAssemblyError, match="invalid size"):
            assemble_pdf([fake_page(width=width, height=height)])


class TestPdfObjectWriter:
    def test_out_of_order_object_rejected(self):
        writer = PdfObjectWriter()
        with pytest.raises(DocumentAssemblyError, match="out of order"):
            with writer.object(2):
                pass

    def test_offsets_recorded(self):
        writer = PdfObjectWriter(header=b"%HDR\n")
        with writer.object(1):
            writer.write_ascii("<< >>\n")
        with writer.object(2):
            writer.write_ascii("<< >>\n")

        assert writer.object_count == 2
        assert writer.offsets == {1: 5, 2: 5 + len(b"1 0 obj\n<< >>\nendobj\n")}


class TestWritePdf:
    def test_write_pdf(self, tmp_path):
        path = tmp_path / "scores" / "piece.pdf"
        write_pdf([fake_page()], path)

        assert path.read_bytes() == assemble_pdf([fake_page()])
        assert [p.name for p in path.parent.iterdir()] == ["piece.pdf"]

    def test_nothing_written_on_failure(self, tmp_path):
        path = tmp_path / "piece.pdf"
        with pytest.raises(DocumentAssemblyError):
            write_pdf([fake_page(height=0)], path)

        assert not path.exists()
        assert list(tmp_path.iterdir()) == []

    def test_existing_file_kept_on_failure(self, tmp_path):
        path = tmp_path / "piece.pdf"
        path.write_bytes(b"previous")

        with pytest.raises(DocumentAssemblyError):
            write_pdf([], path)

        assert path.read_bytes() == b"previous"


class TestPageImage:
    def test_from_image_flattens_transparency(self):
        image = Image.new("RGBA", (40, 30), (0, 0, 0, 0))

        page = PageImage.from_image(image)

        assert (page.width, page.height) == (40, 30)
        assert page.data.startswith(b"\xff\xd8")
        assert page.filter == "DCTDecode"
        assert page.width_points == pytest.approx(30.0)

    def test_from_file(self, tmp_path):
        path = tmp_path / "page.png"
        Image.new("L", (96, 192), 255).save(path)

        page = PageImage.from_file(path)

        assert (page.width, page.height) == (96, 192)
        assert (page.width_points, page.height_points) == (72.0, 144.0)
        document = assemble_pdf([page])
        assert b"/MediaBox [0 0 72.00 144.00]" in document

    def test_from_unreadable_file(self, tmp_path):
        path = tmp_path / "page.png"
        path.write_bytes(b"not an image")
        with pytest.raises(DocumentAssemblyError, match="Cannot read page image"):
            PageImage.from_file(path)
