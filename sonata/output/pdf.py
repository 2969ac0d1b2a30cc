"""PDF export - Assemble rasterized score pages into a PDF document.

The document is written by hand, object by object:
- Object 1: catalog
- Object 2: page tree
- Objects 3+3i, 4+3i, 5+3i: page, content stream and image of page i

``PdfObjectWriter`` records each object's byte offset as it is written and
builds the cross-reference table from those offsets.
"""

import io
import os
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, Sequence, Union

from ..core import DocumentAssemblyError
from ..core.constants import PIXELS_PER_INCH, POINTS_PER_INCH

PDF_HEADER = b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n"
CATALOG_ID = 1
PAGES_ID = 2
FIRST_PAGE_ID = 3
OBJECTS_PER_PAGE = 3


@dataclass
class PageImage:
    """One rasterized page: compressed image bytes plus pixel size."""

    data: bytes
    width: int
    height: int
    color_space: str = "DeviceRGB"
    bits_per_component: int = 8
    filter: str = "DCTDecode"

    @property
    def width_points(self) -> float:
        return self.width * POINTS_PER_INCH / PIXELS_PER_INCH

    @property
    def height_points(self) -> float:
        return self.height * POINTS_PER_INCH / PIXELS_PER_INCH

    @classmethod
    def from_image(cls, image, quality: int = 95) -> "PageImage":
        """Encode a Pillow image as a JPEG page on a white background."""
        from PIL import Image

        if image.mode in ("RGBA", "LA", "P"):
            image = image.convert("RGBA")
            background = Image.new("RGB", image.size, (255, 255, 255))
            background.paste(image, mask=image.getchannel("A"))
            image = background
        elif image.mode != "RGB":
            image = image.convert("RGB")

        buffer = io.BytesIO()
        image.save(buffer, format="JPEG", quality=quality)
        return cls(data=buffer.getvalue(), width=image.width, height=image.height)

    @classmethod
    def from_file(cls, path: Union[str, Path], quality: int = 95) -> "PageImage":
        """Load any image Pillow can read and encode it as a JPEG page."""
        from PIL import Image, UnidentifiedImageError

        try:
            with Image.open(path) as image:
                image.load()
                return cls.from_image(image, quality=quality)
        except (OSError, UnidentifiedImageError) as e:
            raise DocumentAssemblyError(f"Cannot read page image {path}: {e}") from e


class PdfObjectWriter:
    """Append-only PDF body writer that tracks object offsets."""

    def __init__(self, header: bytes = PDF_HEADER):
        self._buffer = bytearray()
        self._offsets: Dict[int, int] = {}
        self._next_id = 1
        self.write(header)

    @property
    def position(self) -> int:
        return len(self._buffer)

    @property
    def object_count(self) -> int:
        return self._next_id - 1

    @property
    def offsets(self) -> Dict[int, int]:
        return dict(self._offsets)

    def write(self, data: bytes) -> None:
        self._buffer += data

    def write_ascii(self, text: str) -> None:
        self.write(text.encode("latin-1"))

    @contextmanager
    def object(self, obj_id: int) -> Iterator["PdfObjectWriter"]:
        """Write ``obj_id 0 obj ... endobj``; ids must be written in order."""
        if obj_id != self._next_id:
            raise DocumentAssemblyError(
                f"Object {obj_id} written out of order, expected {self._next_id}"
            )
        self._offsets[obj_id] = self.position
        self.write_ascii(f"{obj_id} 0 obj\n")
        yield self
        self.write_ascii("endobj\n")
        self._next_id += 1

    def finish(self, root_id: int = CATALOG_ID) -> bytes:
        """Append the xref table and trailer and return the whole document."""
        size = self.object_count + 1
        xref_offset = self.position
        self.write_ascii(f"xref\n0 {size}\n")
        self.write_ascii("0000000000 65535 f \n")
        for obj_id in range(1, size):
            self.write_ascii(f"{self._offsets[obj_id]:010d} 00000 n \n")
        self.write_ascii(
            f"trailer\n<< /Size {size} /Root {root_id} 0 R >>\nstartxref\n{xref_offset}\n%%EOF"
        )
        return bytes(self._buffer)


def _validate_pages(pages: Sequence[PageImage]) -> None:
    if not pages:
        raise DocumentAssemblyError("No pages to assemble")
    for i, page in enumerate(pages, start=1):
        if page is None or not page.data:
            raise DocumentAssemblyError(f"Page {i} has no image data")
        if page.width <= 0 or page.height <= 0:
            raise DocumentAssemblyError(
                f"Page {i} has invalid size {page.width}x{page.height}"
            )


def assemble_pdf(pages: Sequence[PageImage]) -> bytes:
    """
    Build a PDF with one full-page image per page.

    Args:
        pages: Rasterized pages in reading order

    Returns:
        The complete PDF file contents

    Raises:
        DocumentAssemblyError: If there are no pages or a page is unusable
    """
    _validate_pages(pages)
    writer = PdfObjectWriter()

    with writer.object(CATALOG_ID):
        writer.write_ascii(f"<< /Type /Catalog /Pages {PAGES_ID} 0 R >>\n")

    kids = " ".join(
        f"{FIRST_PAGE_ID + i * OBJECTS_PER_PAGE} 0 R" for i in range(len(pages))
    )
    with writer.object(PAGES_ID):
        writer.write_ascii(f"<< /Type /Pages /Count {len(pages)} /Kids [{kids}] >>\n")

    for i, page in enumerate(pages):
        page_id = FIRST_PAGE_ID + i * OBJECTS_PER_PAGE
        content_id = page_id + 1
        image_id = page_id + 2
        name = f"Im{i + 1}"
        width = f"{page.width_points:.2f}"
        height = f"{page.height_points:.2f}"
        content = f"q\n{width} 0 0 {height} 0 0 cm\n/{name} Do\nQ\n"

        with writer.object(page_id):
            writer.write_ascii(
                f"<< /Type /Page /Parent {PAGES_ID} 0 R /MediaBox [0 0 {width} {height}] "
                f"/Resources << /XObject << /{name} {image_id} 0 R >> >> "
                f"/Contents {content_id} 0 R >>\n"
            )

        with writer.object(content_id):
            writer.write_ascii(f"<< /Length {len(content)} >>\nstream\n{content}endstream\n")

        with writer.object(image_id):
            writer.write_ascii(
                f"<< /Type /XObject /Subtype /Image /Width {page.width} /Height {page.height} "
                f"/ColorSpace /{page.color_space} /BitsPerComponent {page.bits_per_component} "
                f"/Filter /{page.filter} /Length {len(page.data)} >>\nstream\n"
            )
            writer.write(page.data)
            writer.write_ascii("\nendstream\n")

    return writer.finish()


def write_pdf(pages: Sequence[PageImage], output_path: Union[str, Path]) -> None:
    """Assemble pages and write the PDF; nothing is written if assembly fails."""
    document = assemble_pdf(pages)
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(dir=output_path.parent, suffix=".pdf.tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(document)
        os.replace(tmp_name, output_path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise
