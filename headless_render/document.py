"""Compose PDF documents from blank pages, images and existing PDFs.

Pages are held as PyPDF2 page objects. Blank pages and image overlays are
drawn with reportlab and merged onto the current page, so every page in a
document comes from a real PDF stream.
"""

from __future__ import annotations

import base64
import io
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union
from urllib.parse import unquote_to_bytes

try:
    from PyPDF2 import PageObject, PdfReader, PdfWriter  # type: ignore[import-not-found]
except ImportError as exc:  # pragma: no cover - surfaced at runtime
    raise SystemExit(
        "Missing dependency 'PyPDF2'. Install with pip install PyPDF2"
    ) from exc

try:
    from reportlab.lib import pagesizes  # type: ignore[import-not-found]
    from reportlab.lib.units import cm, inch, mm  # type: ignore[import-not-found]
    from reportlab.lib.utils import ImageReader  # type: ignore[import-not-found]
    from reportlab.pdfgen import canvas  # type: ignore[import-not-found]
except ImportError as exc:  # pragma: no cover - surfaced at runtime
    raise SystemExit(
        "Missing dependency 'reportlab'. Install with pip install reportlab"
    ) from exc

try:
    from PIL import Image  # type: ignore[import-not-found]
except ImportError as exc:  # pragma: no cover - surfaced at runtime
    raise SystemExit(
        "Missing dependency 'Pillow'. Install with pip install Pillow"
    ) from exc

from .config import DocumentOptions, merge
from .errors import UnsupportedOperationError

logger = logging.getLogger(__name__)

UNITS: Dict[str, float] = {
    "pt": 1.0,
    "mm": mm,
    "cm": cm,
    "in": inch,
    "px": 0.75,
}
ORIENTATIONS = {
    "portrait": "portrait",
    "p": "portrait",
    "landscape": "landscape",
    "l": "landscape",
}
COMPRESSION_MODES = ("NONE", "FAST", "MEDIUM", "SLOW")
FORMAT_ALIASES = {"JPG": "JPEG", "TIF": "TIFF"}
PX_TO_PT = 0.75
DATA_URI_NAME = "generated.pdf"

ImageSource = Union[str, Path, bytes, bytearray, "Image.Image"]
PageFormat = Union[str, Sequence[float]]


def page_size(
    format: PageFormat, orientation: str = "portrait", unit: str = "mm"
) -> tuple[float, float]:
    """Return ``(width, height)`` in points for a named or explicit format.

    Named formats are reportlab page sizes (``a4``, ``letter``...) and are
    case-insensitive. An explicit ``(width, height)`` pair is read in
    ``unit``.
    """

    if isinstance(format, str):
        size = getattr(pagesizes, format.upper(), None)
        if not (isinstance(size, tuple) and len(size) == 2):
            raise ValueError(f"Unknown page format: {format!r}")
    else:
        width, height = format
        factor = _unit_factor(unit)
        size = (float(width) * factor, float(height) * factor)

    try:
        resolved = ORIENTATIONS[orientation.lower()]
    except KeyError as exc:
        raise ValueError(f"Unknown orientation: {orientation!r}") from exc
    if resolved == "landscape":
        return pagesizes.landscape(size)
    return pagesizes.portrait(size)


def _unit_factor(unit: str) -> float:
    try:
        return UNITS[unit.lower()]
    except KeyError as exc:
        raise ValueError(f"Unknown unit: {unit!r}") from exc


def _render_single_page(
    width: float, height: float, *, compress: bool = False, draw: Any = None
) -> PageObject:
    """Draw one reportlab page and return it as a PyPDF2 page."""

    buffer = io.BytesIO()
    pdf_canvas = canvas.Canvas(
        buffer, pagesize=(width, height), pageCompression=int(compress)
    )
    if draw is not None:
        draw(pdf_canvas)
    pdf_canvas.showPage()
    pdf_canvas.save()
    buffer.seek(0)
    return PdfReader(buffer).pages[0]


def _read_image_bytes(image_data: Union[str, Path, bytes, bytearray]) -> bytes:
    if isinstance(image_data, (bytes, bytearray)):
        return bytes(image_data)
    if isinstance(image_data, str) and image_data.startswith("data:"):
        header, _, payload = image_data.partition(",")
        if header.endswith(";base64"):
            return base64.b64decode(payload)
        return unquote_to_bytes(payload)
    return Path(image_data).read_bytes()


def load_image(image_data: ImageSource, format: Optional[str] = None) -> "Image.Image":
    """Decode ``image_data``; ``format`` restricts Pillow to that decoder."""

    if isinstance(image_data, Image.Image):
        return image_data
    buffer = io.BytesIO(_read_image_bytes(image_data))
    formats = None
    if format:
        name = format.upper()
        formats = [FORMAT_ALIASES.get(name, name)]
    image = Image.open(buffer, formats=formats)
    image.load()
    return image


class Document:
    """A PDF document built page by page.

    Starts with one blank page. Image insertion targets the current page,
    which is the most recently added or inserted page.
    """

    def __init__(
        self, options: Optional[DocumentOptions] = None, **overrides: Any
    ) -> None:
        self.options = merge(options or DocumentOptions(), **overrides)
        self._unit = _unit_factor(self.options.unit)
        self._default_size = page_size(
            self.options.format, self.options.orientation, self.options.unit
        )
        self._pages: List[PageObject] = []
        self._sources: List[PdfReader] = []
        self._images: Dict[str, ImageReader] = {}
        self._current = -1
        self.add_page()

    @property
    def page_count(self) -> int:
        return len(self._pages)

    @property
    def current_page(self) -> int:
        """1-based number of the page that receives images (0 if empty)."""

        return self._current + 1

    def _blank(self, size: tuple[float, float]) -> PageObject:
        return _render_single_page(size[0], size[1])

    def _check_page_number(self, number: int) -> int:
        if not 1 <= number <= len(self._pages):
            raise IndexError(
                f"Page {number} out of range (document has "
                f"{len(self._pages)} pages)"
            )
        return number - 1

    def add_page(
        self,
        format: Optional[PageFormat] = None,
        orientation: Optional[str] = None,
    ) -> "Document":
        """Append a blank page; missing arguments use the document defaults."""

        size = page_size(
            format if format is not None else self.options.format,
            orientation or self.options.orientation,
            self.options.unit,
        )
        self._pages.append(self._blank(size))
        self._current = len(self._pages) - 1
        return self

    def insert_page(self, before_page: Optional[int] = None) -> "Document":
        """Insert a blank page in front of the 1-based ``before_page``."""

        if before_page is None:
            return self
        index = self._check_page_number(before_page)
        self._pages.insert(index, self._blank(self._default_size))
        self._current = index
        return self

    def delete_page(self, number: Optional[int] = None) -> "Document":
        """Remove the 1-based page ``number``."""

        if number is None:
            return self
        index = self._check_page_number(number)
        del self._pages[index]
        if self._current >= index:
            self._current = max(self._current - 1, 0)
        self._current = min(self._current, len(self._pages) - 1)
        return self

    def insert_html(self, html: str, options: Optional[dict] = None) -> "Document":
        raise UnsupportedOperationError(
            "HTML insertion is not supported; render the HTML with "
            "Browser.html(...).pdf(...) and add it with insert_pdf()"
        )

    def insert_image(
        self,
        image_data: ImageSource,
        format: Optional[str] = None,
        x: float = 0,
        y: float = 0,
        width: Optional[float] = None,
        height: Optional[float] = None,
        alias: Optional[str] = None,
        compression: str = "NONE",
        rotation: float = 0,
    ) -> "Document":
        """Draw an image on the current page.

        ``x``/``y``/``width``/``height`` are in the document unit, measured
        from the top-left corner of the page. When a size is missing the
        image's natural size (96 dpi) is used, keeping the aspect ratio if
        only one side is given. ``rotation`` is counter-clockwise in degrees
        around the image's top-left corner.
        """

        compression = compression.upper()
        if compression not in COMPRESSION_MODES:
            raise ValueError(
                f"compression must be one of {', '.join(COMPRESSION_MODES)}"
            )
        if self._current < 0:
            raise IndexError("Document has no pages")

        if alias is not None and alias in self._images:
            reader = self._images[alias]
        else:
            reader = ImageReader(load_image(image_data, format))
            if alias is not None:
                self._images[alias] = reader

        px_width, px_height = reader.getSize()
        natural_w = px_width * PX_TO_PT / self._unit
        natural_h = px_height * PX_TO_PT / self._unit
        if width is None and height is None:
            width, height = natural_w, natural_h
        elif width is None:
            width = height * natural_w / natural_h  # type: ignore[operator]
        elif height is None:
            height = width * natural_h / natural_w

        page = self._pages[self._current]
        page_width = float(page.mediabox.width)
        page_height = float(page.mediabox.height)
        w_pt = float(width) * self._unit
        h_pt = float(height) * self._unit  # type: ignore[arg-type]

        def draw(pdf_canvas: Any) -> None:
            pdf_canvas.saveState()
            pdf_canvas.translate(x * self._unit, page_height - y * self._unit)
            if rotation:
                pdf_canvas.rotate(rotation)
            pdf_canvas.drawImage(
                reader, 0, -h_pt, width=w_pt, height=h_pt, mask="auto"
            )
            pdf_canvas.restoreState()

        overlay = _render_single_page(
            page_width,
            page_height,
            compress=compression != "NONE",
            draw=draw,
        )
        page.merge_page(overlay)
        logger.debug(
            "Image placed on page %s at (%s, %s)", self.current_page, x, y
        )
        return self

    def insert_pdf(self, source: Union[str, Path, bytes]) -> "Document":
        """Append every page of an existing PDF file or byte string."""

        if isinstance(source, (bytes, bytearray)):
            reader = PdfReader(io.BytesIO(bytes(source)))
        else:
            reader = PdfReader(str(source))
        self._sources.append(reader)
        self._pages.extend(reader.pages)
        self._current = len(self._pages) - 1
        return self

    def output(self) -> bytes:
        """Serialize the document to PDF bytes."""

        writer = PdfWriter()
        for page in self._pages:
            writer.add_page(page)
        if self.options.compress:
            for page in writer.pages:
                page.compress_content_streams()
        buffer = io.BytesIO()
        writer.write(buffer)
        return buffer.getvalue()

    def _data_uri(self, filename: str) -> str:
        payload = base64.b64encode(self.output()).decode("ascii")
        return f"data:application/pdf;filename={filename};base64,{payload}"

    def stream(self) -> str:
        """Finalize the document and return it as a data URI string."""

        return self._data_uri(DATA_URI_NAME)

    def inline(self, filename: str = "document.pdf") -> str:
        """Return a data URI naming ``filename`` for inline display."""

        return self._data_uri(filename)

    def download(self, filename: str = "document.pdf") -> None:
        raise UnsupportedOperationError(
            "Forced downloads are not supported; use save() or inline()"
        )

    def save(self, filename: str | Path = "document.pdf") -> str:
        """Write the document to ``filename`` and return the path."""

        target = Path(filename)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(self.output())
        logger.info("Document saved: %s", target)
        return str(target)


__all__ = [
    "COMPRESSION_MODES",
    "Document",
    "UNITS",
    "load_image",
    "page_size",
]
