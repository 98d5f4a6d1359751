"""In-memory PDFs for the test suite, built with PyMuPDF."""

import fitz

PAGE_W, PAGE_H = 600, 800


def blank_pdf(pages=1, width=PAGE_W, height=PAGE_H) -> bytes:
    doc = fitz.open()
    for _ in range(pages):
        doc.new_page(width=width, height=height)
    out = doc.tobytes()
    doc.close()
    return out


def _add_widget(page, name, field_type, rect, value=None):
    w = fitz.Widget()
    w.field_name = name
    w.field_type = field_type
    w.rect = fitz.Rect(rect)
    if value is not None:
        w.field_value = value
    page.add_widget(w)


def form_pdf(prefill: str = None, note: str = None) -> bytes:
    """Two pages. Page 1: text "name" + checkbox "agree". Page 2: text "city".

    Rects are given top-down (PyMuPDF space); in native PDF space "name"
    spans y 730..750 on the 800pt page. ``note`` adds a square comment
    annotation to page 1.
    """
    doc = fitz.open()
    p1 = doc.new_page(width=PAGE_W, height=PAGE_H)
    _add_widget(p1, "name", fitz.PDF_WIDGET_TYPE_TEXT, (100, 50, 300, 70), prefill)
    _add_widget(p1, "agree", fitz.PDF_WIDGET_TYPE_CHECKBOX, (400, 100, 415, 115))
    if note is not None:
        annot = p1.add_rect_annot(fitz.Rect(100, 300, 200, 350))
        annot.set_info(content=note)
        annot.update()
    p2 = doc.new_page(width=PAGE_W, height=PAGE_H)
    _add_widget(p2, "city", fitz.PDF_WIDGET_TYPE_TEXT, (50, 700, 250, 720))
    out = doc.tobytes()
    doc.close()
    return out


def spans(pdf_bytes: bytes, page_index: int = 0):
    doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    try:
        found = []
        for block in doc[page_index].get_text("dict")["blocks"]:
            for line in block.get("lines", []):
                found.extend(line["spans"])
        return found
    finally:
        doc.close()


def page_text(pdf_bytes: bytes, page_index: int = 0) -> str:
    doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    try:
        return doc[page_index].get_text()
    finally:
        doc.close()


def widgets(pdf_bytes: bytes, page_index: int = 0):
    """(name, type, rect) for each widget on a page."""
    doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    try:
        return [(w.field_name, w.field_type, fitz.Rect(w.rect)) for w in doc[page_index].widgets()]
    finally:
        doc.close()


def annot_types(pdf_bytes: bytes, page_index: int = 0):
    """Subtype names of the non-widget annotations on a page."""
    doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    try:
        return [a.type[1] for a in doc[page_index].annots()]
    finally:
        doc.close()
