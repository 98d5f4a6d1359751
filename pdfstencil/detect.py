"""Find pre-existing AcroForm widgets in a PDF and turn them into fields.

Widget rectangles are read straight from each page's ``/Annots`` in native
PDF space (origin bottom-left, points) and flipped into the normalized
top-left space used by templates. Detection is best-effort: any failure
yields an empty list so an upload is never blocked by a strange form.
"""

from __future__ import annotations

import io
import logging
from typing import List, Optional, Tuple

import pikepdf

from .models import FieldType, PdfField

logger = logging.getLogger(__name__)

_MAX_PARENT_DEPTH = 32


# ----------------------------------------------------------------------
def _full_field_name(annot) -> Optional[str]:
    """Join the /T partial names up the /Parent chain into a dotted name."""
    parts = []
    node = annot
    for _ in range(_MAX_PARENT_DEPTH):
        if node is None:
            break
        name = node.get("/T")
        if name is not None:
            parts.append(str(name))
        node = node.get("/Parent")
    return ".".join(reversed(parts)) if parts else None


def _inherited_field_type(annot) -> str:
    node = annot
    for _ in range(_MAX_PARENT_DEPTH):
        if node is None:
            break
        ft = node.get("/FT")
        if ft is not None:
            return str(ft)
        node = node.get("/Parent")
    return ""


def _widget_rect(annot) -> Optional[Tuple[float, float, float, float]]:
    rect = annot.get("/Rect")
    if not isinstance(rect, pikepdf.Array) or len(rect) != 4:
        return None
    try:
        x1, y1, x2, y2 = (float(v) for v in rect)
    except (TypeError, ValueError):
        return None
    return min(x1, x2), min(y1, y2), max(x1, x2), max(y1, y2)


def _viewport_size(page: pikepdf.Page) -> Tuple[float, float]:
    """Unscaled page size as displayed: crop box, swapped for 90/270 rotation."""
    box = [float(v) for v in page.cropbox]
    width = abs(box[2] - box[0])
    height = abs(box[3] - box[1])
    rotate = int(page.obj.get("/Rotate", 0)) % 360
    if rotate in (90, 270):
        width, height = height, width
    return width, height


# ----------------------------------------------------------------------
def _detect(document_bytes: bytes) -> List[PdfField]:
    results: List[PdfField] = []

    with pikepdf.Pdf.open(io.BytesIO(bytes(document_bytes))) as pdf:
        for page_index, page in enumerate(pdf.pages):
            annots = page.obj.get("/Annots")
            if not isinstance(annots, pikepdf.Array):
                continue
            page_width, page_height = _viewport_size(page)

            for annot in annots:
                if not isinstance(annot, pikepdf.Dictionary) or annot.get("/Subtype") != "/Widget":
                    continue
                name = _full_field_name(annot)
                rect = _widget_rect(annot)
                if not name or rect is None:
                    continue
                x1, y1, x2, y2 = rect
                if x2 <= x1 or y2 <= y1:
                    continue

                field_type: FieldType = "checkbox" if _inherited_field_type(annot) == "/Btn" else "text"
                field = PdfField(
                    id=f"auto_{page_index + 1}_{len(results)}",
                    page=page_index,
                    x=x1 / page_width,
                    y=(page_height - y2) / page_height,
                    width=(x2 - x1) / page_width,
                    height=(y2 - y1) / page_height,
                    key=name,
                    type=field_type,
                )
                logger.debug("Detected %s field %r on page %d", field_type, name, page_index + 1)
                results.append(field)

    return results


def detect_form_fields(document_bytes: bytes) -> List[PdfField]:
    """Return a field for every named widget in the document, or [] on failure."""
    try:
        fields = _detect(document_bytes)
    except Exception as exc:
        logger.warning("Form field detection failed: %s", exc)
        return []
    logger.info("Detected %d form field(s)", len(fields))
    return fields
