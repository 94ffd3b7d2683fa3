"""
Format-specific conversion strategies.

Each strategy takes ``(input_path, output_path, *, source_suffix)`` and either
writes a complete PDF to ``output_path`` or raises a classified ConversionError.
``source_suffix`` is the extension the input was classified by; staged files
may not carry it. Cleaning up a partially written output is the dispatcher's job.
"""

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from PIL import Image, UnidentifiedImageError
from reportlab.pdfgen import canvas

from .errors import DecodeFailure, IOFailure, OfficeConversionUnavailable, UnsupportedImageFormat
from .interfaces import OfficeConverterGateway

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Text layout
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PageGeometry:
    width: float = 595
    height: float = 842
    margin: float = 50
    font_size: float = 12
    font_name: str = "Helvetica"

    @property
    def usable_width(self) -> float:
        return self.width - 2 * self.margin

    @property
    def line_height(self) -> float:
        return self.font_size + 2

    @property
    def top(self) -> float:
        return self.height - self.margin

    def estimate_width(self, text: str) -> float:
        # constant-width approximation, not real glyph metrics
        return len(text) * self.font_size * 0.5


A4 = PageGeometry()


@dataclass(frozen=True)
class TextLine:
    text: str
    x: float
    y: float


@dataclass
class TextPage:
    lines: list[TextLine] = field(default_factory=list)


def wrap_line(line: str, geometry: PageGeometry = A4) -> list[str]:
    """Greedily wrap one source line into visual lines.

    A single word wider than the usable width is kept whole on its own line.
    """
    wrapped: list[str] = []
    current = ""
    for word in line.split(" "):
        candidate = current + (" " if current else "") + word
        if geometry.estimate_width(candidate) > geometry.usable_width and current:
            wrapped.append(current)
            current = word
        else:
            current = candidate
    if current:
        wrapped.append(current)
    return wrapped


def layout_text(text: str, geometry: PageGeometry = A4) -> list[TextPage]:
    """Place wrapped lines top-down, starting a new page once the cursor drops below the margin."""
    pages = [TextPage()]
    y = geometry.top
    for source_line in text.split("\n"):
        for visual in wrap_line(source_line.rstrip("\r"), geometry):
            if y < geometry.margin:
                pages.append(TextPage())
                y = geometry.top
            pages[-1].lines.append(TextLine(visual, geometry.margin, y))
            y -= geometry.line_height
    return pages


def render_text_pdf(
    input_path: Path, output_path: Path, geometry: PageGeometry = A4, *, source_suffix: str = ""
) -> None:
    try:
        text = input_path.read_bytes().decode("utf-8", errors="replace")
    except OSError as e:
        raise IOFailure("could not read the text document") from e

    pages = layout_text(text, geometry)
    try:
        c = canvas.Canvas(str(output_path), pagesize=(geometry.width, geometry.height))
        for page in pages:
            c.setFont(geometry.font_name, geometry.font_size)
            for line in page.lines:
                c.drawString(line.x, line.y, line.text)
            c.showPage()
        c.save()
    except OSError as e:
        raise IOFailure("could not write the converted PDF") from e
    logger.debug("Laid out %s onto %d page(s)", input_path.name, len(pages))


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------

EMBEDDABLE_IMAGE_SUFFIXES = {".png", ".jpg", ".jpeg"}


def embed_image(input_path: Path, output_path: Path, *, source_suffix: str = "") -> None:
    """Wrap a PNG or JPEG as a single page sized to its pixel dimensions."""
    suffix = (source_suffix or input_path.suffix).lower()
    if suffix not in EMBEDDABLE_IMAGE_SUFFIXES:
        raise UnsupportedImageFormat(
            f"Image format {suffix or '(none)'} requires conversion. Please use JPG or PNG."
        )

    try:
        with Image.open(input_path) as img:
            img.load()
            width, height = img.size
    except (FileNotFoundError, PermissionError) as e:
        raise IOFailure("could not read the image") from e
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
        raise DecodeFailure(f"image data could not be decoded as {suffix[1:].upper()}") from e

    try:
        c = canvas.Canvas(str(output_path), pagesize=(width, height))
        # a path (not a PIL image) lets reportlab embed JPEG data without re-encoding
        c.drawImage(str(input_path), 0, 0, width=width, height=height, mask="auto")
        c.showPage()
        c.save()
    except OSError as e:
        raise IOFailure("could not write the converted PDF") from e


# ---------------------------------------------------------------------------
# Office documents
# ---------------------------------------------------------------------------


class OfficeDelegate:
    """Hands office documents to an external converter and stores its output verbatim."""

    def __init__(self, gateway: OfficeConverterGateway, target_format: str = "pdf") -> None:
        self._gateway = gateway
        self._target_format = target_format

    def __call__(self, input_path: Path, output_path: Path, *, source_suffix: str = "") -> None:
        try:
            data = input_path.read_bytes()
        except OSError as e:
            raise IOFailure("could not read the office document") from e

        try:
            converted = self._gateway.convert(
                data, self._target_format, source_suffix=(source_suffix or input_path.suffix).lower()
            )
            if not converted:
                raise RuntimeError("office converter returned no data")
        except Exception as e:
            logger.error("Office to PDF conversion error: %s", e)
            raise OfficeConversionUnavailable(
                "LibreOffice conversion failed. Make sure LibreOffice is installed and accessible."
            ) from e

        try:
            output_path.write_bytes(converted)
        except OSError as e:
            raise IOFailure("could not write the converted PDF") from e


# ---------------------------------------------------------------------------
# PDF passthrough
# ---------------------------------------------------------------------------


def copy_pdf(input_path: Path, output_path: Path, *, source_suffix: str = "") -> None:
    try:
        shutil.copyfile(input_path, output_path)
    except OSError as e:
        raise IOFailure("could not copy the PDF document") from e
