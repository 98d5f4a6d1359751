"""Template-driven PDF filling: normalized field rectangles in, PDFs out."""

from .coords import ContainerSize, NormalizedRect, PixelRect, to_normalized, to_pixels
from .detect import detect_form_fields
from .engine import export_fillable, fill_pdf, fill_request, one_off_fill
from .errors import DocumentParseError, TemplateNotFound
from .models import FieldStyle, FillRequest, OneOffField, PdfField, Template, schema_keys
from .style import resolve_style
from .values import parse_checkbox

__version__ = "0.1.0"
