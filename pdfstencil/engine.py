"""Fill a PDF from template fields, or export the fields as a fillable form.

Positions come from the normalized (top-left origin) field rectangles and
are mapped onto each page's size in points. PyMuPDF works in a top-left
page space too, so the document-space baseline

    baseline_y = page_height - field.y * page_height - font_size

becomes ``field.y * page_height + font_size`` measured from the top. Text is
placed one font size below the top of the rectangle rather than at the true
font ascent.
"""

from __future__ import annotations

import functools
import io
import logging
import re
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import fitz  # PyMuPDF
import pikepdf

from .errors import DocumentParseError
from .models import DataValue, FieldStyle, FillRequest, OneOffField, PdfField
from .style import resolve_style
from .values import coerce_value

logger = logging.getLogger(__name__)

FONT_NAME = "helv"
# fallbacks for text beyond Latin-1: Noto Sans (pymupdf-fonts), then MuPDF's CJK font
UNICODE_FONTS = ("notos", "cjk")
CHECK_MARK = "X"
MIN_CHECKBOX_PT = 12.0

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9_.]")
_REPEATED_DOTS = re.compile(r"\.{2,}")


# ----------------------------------------------------------------------
# Document helpers
# ----------------------------------------------------------------------

def _open_document(document_bytes: bytes) -> fitz.Document:
    try:
        doc = fitz.open(stream=bytes(document_bytes), filetype="pdf")
    except Exception as exc:
        raise DocumentParseError(f"Could not load PDF: {exc}") from exc
    if doc.page_count == 0:
        doc.close()
        raise DocumentParseError("PDF has no pages")
    return doc


def _page_for(doc: fitz.Document, index: int) -> fitz.Page:
    """Target page for a field; out-of-range indexes fall back to page 0."""
    if 0 <= index < doc.page_count:
        return doc[index]
    logger.debug("Page %d out of range (%d pages), using page 0", index, doc.page_count)
    return doc[0]


def _save(doc: fitz.Document) -> bytes:
    return doc.tobytes(garbage=0, deflate=True)


def text_origin(page: fitz.Page, field: PdfField, font_size: float) -> fitz.Point:
    """Baseline start of a field's text, in PyMuPDF (top-left) page space."""
    rect = page.rect
    return fitz.Point(field.x * rect.width, field.y * rect.height + font_size)


def widget_rect(page: fitz.Page, field: PdfField, min_size: float = 0.0) -> fitz.Rect:
    """Widget rectangle for a field, grown to ``min_size`` from its bottom-left corner."""
    page_width, page_height = page.rect.width, page.rect.height
    left = field.x * page_width
    bottom = page_height - field.y * page_height - field.height * page_height  # document space
    width = max(field.width * page_width, min_size)
    height = max(field.height * page_height, min_size)

    top_down_bottom = page_height - bottom
    return fitz.Rect(left, top_down_bottom - height, left + width, top_down_bottom)


# ----------------------------------------------------------------------
# Fonts
# ----------------------------------------------------------------------

def _latin_only(text: str) -> bool:
    return all(ord(c) < 256 for c in text)


@functools.lru_cache(maxsize=None)
def _unicode_font(name: str) -> fitz.Font:
    return fitz.Font(name)


def _font_for(page: fitz.Page, text: str) -> str:
    """Font name to draw ``text`` with, registering a Unicode font on the page if needed.

    Helvetica covers Latin-1; anything beyond it goes to the first fallback
    font that has every glyph, or the first one with a warning.
    """
    if _latin_only(text):
        return FONT_NAME

    needed = {ord(c) for c in text if not c.isspace()}
    chosen = UNICODE_FONTS[0]
    for name in UNICODE_FONTS:
        if all(_unicode_font(name).has_glyph(cp) for cp in needed):
            chosen = name
            break
    else:
        missing = "".join(sorted(chr(cp) for cp in needed if not _unicode_font(chosen).has_glyph(cp)))
        logger.warning("No font has glyphs for %r, they will render blank", missing)

    page.insert_font(fontname=chosen, fontbuffer=_unicode_font(chosen).buffer)
    return chosen


# ----------------------------------------------------------------------
# Flatten
# ----------------------------------------------------------------------

def _is_widget(annot) -> bool:
    return isinstance(annot, pikepdf.Dictionary) and annot.get("/Subtype") == "/Widget"


def flatten_form(document_bytes: bytes) -> bytes:
    """Bake existing form widgets into page content and drop the AcroForm.

    Other annotations (comments, markup, links) are left on the page.
    Best-effort: on any failure the input bytes are returned unchanged.
    """
    try:
        with pikepdf.Pdf.open(io.BytesIO(document_bytes)) as pdf:
            others = {}
            for index, page in enumerate(pdf.pages):
                annots = page.obj.get("/Annots")
                if not isinstance(annots, pikepdf.Array):
                    continue
                others[index] = [
                    a for a in annots if isinstance(a, pikepdf.Dictionary) and not _is_widget(a)
                ]
                page.obj.Annots = pikepdf.Array([a for a in annots if _is_widget(a)])

            if "/AcroForm" in pdf.Root:
                pdf.generate_appearance_streams()
                pdf.flatten_annotations("all")
                if "/AcroForm" in pdf.Root:
                    del pdf.Root["/AcroForm"]

            # widgets without an appearance stream survive flattening; drop them
            for index, page in enumerate(pdf.pages):
                if index not in others:
                    continue
                if others[index]:
                    page.obj.Annots = pikepdf.Array(others[index])
                elif "/Annots" in page.obj:
                    del page.obj["/Annots"]

            out = io.BytesIO()
            pdf.save(out)
            return out.getvalue()
    except Exception as exc:
        logger.warning("Flatten skipped: %s", exc)
        return document_bytes


# ----------------------------------------------------------------------
# Fill
# ----------------------------------------------------------------------

def fill_pdf(
    document_bytes: bytes,
    fields: Sequence[PdfField],
    data: Mapping[str, Optional[DataValue]],
    flatten: bool = True,
    default_style: Optional[FieldStyle] = None,
) -> bytes:
    """Draw each field's value into the page content and return the new PDF.

    Fields whose key has no value in ``data`` are skipped. Checkbox values
    draw an "X" when truthy and nothing otherwise. Raises
    ``DocumentParseError`` if the document cannot be loaded.
    """
    doc = _open_document(document_bytes)
    drawn = 0
    try:
        for field in fields:
            value = coerce_value(field.type, data.get(field.key))
            if value is None:
                logger.debug("No value for key %r, skipping field %s", field.key, field.id)
                continue

            if value.kind == "checkbox":
                if not value.value:
                    continue
                text = CHECK_MARK
            else:
                text = value.value
            if not text:
                continue

            style = resolve_style(field.style, default_style)
            page = _page_for(doc, field.page)
            page.insert_text(
                text_origin(page, field, style.font_size),
                text,
                fontname=_font_for(page, text),
                fontsize=style.font_size,
                color=style.rgb,
            )
            drawn += 1

        out = _save(doc)
    finally:
        doc.close()

    logger.info("Filled %d of %d field(s)", drawn, len(fields))
    if flatten:
        out = flatten_form(out)
    return out


def fill_request(request: FillRequest) -> bytes:
    return fill_pdf(
        request.document_bytes,
        request.fields,
        request.data,
        flatten=request.flatten,
        default_style=request.default_style,
    )


def one_off_fill(
    document_bytes: bytes,
    entries: Sequence[OneOffField],
    default_style: Optional[FieldStyle] = None,
) -> bytes:
    """Flattened fill where every field carries its own value."""
    fields: List[PdfField] = []
    data: Dict[str, Optional[DataValue]] = {}
    for entry in entries:
        fields.append(PdfField(**entry.model_dump(exclude={"key", "value"}), key=entry.id))
        data[entry.id] = entry.value
    return fill_pdf(document_bytes, fields, data, flatten=True, default_style=default_style)


# ----------------------------------------------------------------------
# Fillable export
# ----------------------------------------------------------------------

def safe_field_name(key: str) -> str:
    """Form-field name for a data key: ``[A-Za-z0-9_.]`` only, no empty dot segments."""
    name = _UNSAFE_NAME_CHARS.sub("_", key)
    name = _REPEATED_DOTS.sub(".", name).strip(".")
    return name or "field"


class FieldNamer:
    """Hands out unique field names: ``base``, ``base_2``, ``base_3``, ...

    Names in ``existing`` (fields already in the document) are never handed out.
    """

    def __init__(self, existing: Iterable[str] = ()):
        self._counts: Dict[str, int] = {}
        self._used = set(existing)

    def next_name(self, key: str) -> str:
        base = safe_field_name(key)
        count = self._counts.get(base, 0) + 1
        name = base if count == 1 else f"{base}_{count}"
        while name in self._used:
            count += 1
            name = f"{base}_{count}"
        self._counts[base] = count
        self._used.add(name)
        return name


def export_fillable(document_bytes: bytes, fields: Sequence[PdfField]) -> bytes:
    """Add a native text or checkbox widget for every field.

    Raises ``DocumentParseError`` if the document cannot be loaded.
    """
    doc = _open_document(document_bytes)
    try:
        namer = FieldNamer(w.field_name for page in doc for w in page.widgets() if w.field_name)
        for field in fields:
            page = _page_for(doc, field.page)
            widget = fitz.Widget()
            widget.field_name = namer.next_name(field.key)

            if field.type == "checkbox":
                widget.field_type = fitz.PDF_WIDGET_TYPE_CHECKBOX
                widget.field_value = False
                widget.rect = widget_rect(page, field, min_size=MIN_CHECKBOX_PT)
            else:
                widget.field_type = fitz.PDF_WIDGET_TYPE_TEXT
                widget.text_font = "Helv"
                widget.text_fontsize = 0
                widget.rect = widget_rect(page, field)

            page.add_widget(widget)
            logger.debug("Added widget %r on page %d", widget.field_name, page.number + 1)

        out = _save(doc)
    finally:
        doc.close()

    logger.info("Exported %d fillable field(s)", len(fields))
    return out
