import logging
from typing import Dict, List, Optional
from urllib.parse import quote

from fastapi import Depends, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response
from pydantic import TypeAdapter, ValidationError

from . import config
from .detect import detect_form_fields
from .engine import export_fillable, fill_pdf, one_off_fill
from .errors import DocumentParseError, TemplateNotFound
from .models import CamelModel, DataValue, FieldStyle, OneOffField, PdfField, Template
from .style import parse_style
from .store import FileTemplateRepository, TemplateRepository

logger = logging.getLogger(__name__)

PDF_MEDIA_TYPE = "application/pdf"

_fields_adapter = TypeAdapter(List[PdfField])
_one_off_adapter = TypeAdapter(List[OneOffField])


class FillBody(CamelModel):
    data: Dict[str, Optional[DataValue]] = {}
    flatten: bool = True
    default_style: Optional[FieldStyle] = None


# --- app ---
app = FastAPI(title="pdfstencil")

_repository: Optional[TemplateRepository] = None


def get_repository() -> TemplateRepository:
    global _repository
    if _repository is None:
        _repository = FileTemplateRepository(config.TEMPLATES_DIR)
    return _repository


def _default_style() -> FieldStyle:
    return FieldStyle(font_size=config.DEFAULT_FONT_SIZE, color=config.DEFAULT_COLOR)


def _load_template(repo: TemplateRepository, template_id: str) -> Template:
    try:
        return repo.get(template_id)
    except TemplateNotFound:
        raise HTTPException(404, "Unknown template") from None


def _parse_form_json(adapter: TypeAdapter, raw: str, what: str):
    try:
        return adapter.validate_json(raw)
    except ValidationError as exc:
        raise HTTPException(400, f"Invalid {what}: {exc.error_count()} error(s)") from exc


def _content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback name and the UTF-8 name (RFC 6266)."""
    fallback = filename.encode("ascii", "replace").decode("ascii").replace("?", "_").replace('"', "_")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


def _pdf_response(pdf_bytes: bytes, filename: str) -> Response:
    return Response(
        content=pdf_bytes,
        media_type=PDF_MEDIA_TYPE,
        headers={"Content-Disposition": _content_disposition(filename)},
    )


def _template_summary(t: Template) -> dict:
    return t.model_dump(mode="json", by_alias=True)


@app.get("/healthz")
def healthz():
    return {"ok": True}


@app.get("/api/templates")
def api_templates(repo: TemplateRepository = Depends(get_repository)):
    return [_template_summary(t) for t in repo.list()]


@app.get("/api/templates/{template_id}")
def api_template(template_id: str, repo: TemplateRepository = Depends(get_repository)):
    return _template_summary(_load_template(repo, template_id))


@app.get("/api/templates/{template_id}/pdf")
def api_template_pdf(template_id: str, repo: TemplateRepository = Depends(get_repository)):
    t = _load_template(repo, template_id)
    return _pdf_response(t.source_bytes, f"{t.name}.pdf")


@app.post("/api/templates")
async def create_template(
    name: str = Form(...),
    pdf: UploadFile = File(...),
    fields: Optional[str] = Form(None),
    repo: TemplateRepository = Depends(get_repository),
):
    b = await pdf.read()
    if fields is None:
        field_list = await run_in_threadpool(detect_form_fields, b)
    else:
        field_list = _parse_form_json(_fields_adapter, fields, "fields")

    t = Template.create(name=name, source_bytes=b, fields=field_list)
    repo.save(t)
    return _template_summary(t)


@app.put("/api/templates/{template_id}/fields")
def save_layout(template_id: str, fields: List[PdfField], repo: TemplateRepository = Depends(get_repository)):
    t = _load_template(repo, template_id)
    t.replace_fields(fields)
    repo.save(t)
    return _template_summary(t)


@app.delete("/api/templates/{template_id}")
def delete_template(template_id: str, repo: TemplateRepository = Depends(get_repository)):
    repo.delete(template_id)
    return {"ok": True}


@app.post("/api/templates/{template_id}/fill")
def api_fill_template(template_id: str, body: FillBody, repo: TemplateRepository = Depends(get_repository)):
    t = _load_template(repo, template_id)
    try:
        out = fill_pdf(
            t.source_bytes,
            t.fields,
            body.data,
            flatten=body.flatten,
            default_style=body.default_style or _default_style(),
        )
    except DocumentParseError as exc:
        raise HTTPException(422, str(exc)) from exc
    return _pdf_response(out, f"{t.name or 'filled-form'}.pdf")


@app.post("/api/templates/{template_id}/fillable")
def api_fillable_template(template_id: str, repo: TemplateRepository = Depends(get_repository)):
    t = _load_template(repo, template_id)
    try:
        out = export_fillable(t.source_bytes, t.fields)
    except DocumentParseError as exc:
        raise HTTPException(422, str(exc)) from exc
    return _pdf_response(out, f"{t.name or 'fillable-form'}.pdf")


@app.post("/api/detect")
async def api_detect(pdf: UploadFile = File(...)):
    b = await pdf.read()
    detected = await run_in_threadpool(detect_form_fields, b)
    return [f.model_dump(mode="json", by_alias=True) for f in detected]


@app.post("/api/fill")
async def api_one_off_fill(
    pdf: UploadFile = File(...),
    fields: str = Form(...),
    font_size: str = Form(""),
    color: str = Form(""),
):
    """Fill without a saved template: every field carries its own value."""
    b = await pdf.read()
    entries = _parse_form_json(_one_off_adapter, fields, "fields")
    typed = parse_style(font_size, color) or FieldStyle()
    default_style = FieldStyle(
        font_size=typed.font_size or config.DEFAULT_FONT_SIZE,
        color=typed.color or config.DEFAULT_COLOR,
    )
    try:
        out = await run_in_threadpool(one_off_fill, b, entries, default_style)
    except DocumentParseError as exc:
        raise HTTPException(422, str(exc)) from exc
    return _pdf_response(out, "filled-document.pdf")
