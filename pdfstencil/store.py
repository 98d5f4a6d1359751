"""Template repositories.

The fill/export engine never touches storage; callers look templates up
through a repository and hand the values to the engine. The file backend
keeps one directory per template: ``template.json`` (the record, camelCase)
and ``source.pdf`` (the untouched upload).
"""

from __future__ import annotations

import json
import logging
import shutil
import threading
from pathlib import Path
from typing import Dict, List, Protocol

from .errors import TemplateNotFound
from .models import Template

logger = logging.getLogger(__name__)


class TemplateRepository(Protocol):
    def get(self, template_id: str) -> Template: ...

    def list(self) -> List[Template]: ...

    def save(self, template: Template) -> None: ...

    def delete(self, template_id: str) -> None: ...


class InMemoryTemplateRepository:
    def __init__(self):
        self._templates: Dict[str, Template] = {}
        self._lock = threading.Lock()

    def get(self, template_id: str) -> Template:
        with self._lock:
            try:
                return self._templates[template_id].model_copy(deep=True)
            except KeyError:
                raise TemplateNotFound(template_id) from None

    def list(self) -> List[Template]:
        with self._lock:
            return [t.model_copy(deep=True) for t in self._templates.values()]

    def save(self, template: Template) -> None:
        with self._lock:
            self._templates[template.id] = template.model_copy(deep=True)

    def delete(self, template_id: str) -> None:
        with self._lock:
            self._templates.pop(template_id, None)


class FileTemplateRepository:
    RECORD = "template.json"
    SOURCE = "source.pdf"

    def __init__(self, root: Path):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _dir(self, template_id: str) -> Path:
        # ids are used as directory names
        if not template_id or "/" in template_id or "\\" in template_id or template_id.startswith("."):
            raise TemplateNotFound(template_id)
        return self.root / template_id

    def _load(self, d: Path) -> Template:
        record = json.loads((d / self.RECORD).read_text(encoding="utf-8"))
        template = Template.model_validate(record)
        template.source_bytes = (d / self.SOURCE).read_bytes()
        return template

    def get(self, template_id: str) -> Template:
        d = self._dir(template_id)
        if not (d / self.RECORD).exists():
            raise TemplateNotFound(template_id)
        return self._load(d)

    def list(self) -> List[Template]:
        out = []
        for d in sorted(self.root.glob("*")):
            if (d / self.RECORD).exists():
                out.append(self._load(d))
        out.sort(key=lambda t: t.created_at)
        return out

    def save(self, template: Template) -> None:
        d = self._dir(template.id)
        d.mkdir(parents=True, exist_ok=True)
        if not (d / self.SOURCE).exists():
            (d / self.SOURCE).write_bytes(template.source_bytes)
        record = template.model_dump(mode="json", by_alias=True)
        (d / self.RECORD).write_text(json.dumps(record, indent=2), encoding="utf-8")
        logger.info("Saved template %s (%d fields)", template.id, len(template.fields))

    def delete(self, template_id: str) -> None:
        d = self._dir(template_id)
        if d.exists():
            shutil.rmtree(d)
