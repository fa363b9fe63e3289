"""
Doc Builder: markdown documents generated from section templates.

Templates and documents share one state object under STORAGE_KEY.
"""

import re
import time
import uuid
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from scanstation.models.base import CamelModel
from scanstation.widgets.store import KeyValueStore, read_json, write_json

STORAGE_KEY = "app2.businessAtlas"

DEFAULT_TEMPLATES: dict[str, list[str]] = {
    "Business Atlas": [
        "Mission",
        "Core Offer",
        "Target Customer",
        "Operating Model",
        "KPIs",
        "Current Risks",
        "Next 90 Days",
    ],
    "SOP Builder": [
        "SOP Name",
        "Scope",
        "Owner",
        "Tools Needed",
        "Step-by-step Procedure",
        "Failure Modes",
        "Escalation Rules",
    ],
    "Pricing Strategy": [
        "Pricing Objective",
        "Current Tiers",
        "Guardrails",
        "Discount Rules",
        "Review Cadence",
    ],
}


class Template(CamelModel):
    name: str
    sections: list[str]


class Document(CamelModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    name: str
    template_name: str
    completed: bool = False
    content: str = ""
    updated_at: Optional[int] = Field(
        default=None, description="Last save, epoch milliseconds"
    )


class DocBuilderState(CamelModel):
    templates: list[Template] = Field(default_factory=list)
    docs: list[Document] = Field(default_factory=list)


class DocBuilderStats(BaseModel):
    docs: int
    templates: int
    completed: int


def default_templates() -> list[Template]:
    return [Template(name=name, sections=list(sections)) for name, sections in DEFAULT_TEMPLATES.items()]


def generate_markdown(title: str, sections: list[str]) -> str:
    """Skeleton document: an H1 title, then an H2 and empty bullet per section."""
    lines = [f"# {title}", ""]
    for section in sections:
        lines.extend([f"## {section}", "- ", ""])
    return "\n".join(lines)


def download_filename(doc: Document) -> str:
    stem = re.sub(r'\s+', '_', doc.name)
    return f"{stem}.md"


class DocBuilder:
    """Document and template operations over the stored state."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def state(self) -> DocBuilderState:
        raw = read_json(self.store, STORAGE_KEY)
        if not isinstance(raw, dict):
            return DocBuilderState(templates=default_templates())
        try:
            return DocBuilderState(
                templates=raw.get("templates") if raw.get("templates") is not None else default_templates(),
                docs=raw.get("docs") or [],
            )
        except ValidationError:
            return DocBuilderState(templates=default_templates())

    def _save(self, state: DocBuilderState) -> None:
        write_json(self.store, STORAGE_KEY, state.model_dump(mode="json", by_alias=True))

    def get_doc(self, doc_id: str) -> Optional[Document]:
        return next((doc for doc in self.state().docs if doc.id == doc_id), None)

    def create_doc(self, name: str, template_index: int) -> Document:
        """
        Create a document from a template, newest first.

        Raises:
            ValueError: If the name is blank or the template does not exist
        """
        state = self.state()
        name = name.strip()
        if not name or not 0 <= template_index < len(state.templates):
            raise ValueError("A name and an existing template are required")

        template = state.templates[template_index]
        doc = Document(
            name=name,
            template_name=template.name,
            content=generate_markdown(name, template.sections),
        )
        state.docs = [doc, *state.docs]
        self._save(state)
        return doc

    def add_template(self, name: str, sections: str) -> Template:
        """
        Add a template from a comma-separated section list.

        Raises:
            ValueError: If the name is blank or no sections remain
        """
        name = name.strip()
        parts = [part.strip() for part in sections.split(",")]
        parts = [part for part in parts if part]
        if not name or not parts:
            raise ValueError("A name and at least one section are required")

        state = self.state()
        template = Template(name=name, sections=parts)
        state.templates = [*state.templates, template]
        self._save(state)
        return template

    def delete_template(self, index: int) -> None:
        state = self.state()
        state.templates = [t for i, t in enumerate(state.templates) if i != index]
        self._save(state)

    def save_doc(self, doc_id: str, content: str, now_ms: Optional[int] = None) -> Document:
        """
        Replace a document's content and stamp the save time.

        Raises:
            KeyError: If the document does not exist
        """
        state = self.state()
        doc = self._find(state, doc_id)
        doc.content = content
        doc.updated_at = now_ms if now_ms is not None else int(time.time() * 1000)
        self._save(state)
        return doc

    def toggle_complete(self, doc_id: str) -> Document:
        state = self.state()
        doc = self._find(state, doc_id)
        doc.completed = not doc.completed
        self._save(state)
        return doc

    def remove_doc(self, doc_id: str) -> None:
        state = self.state()
        state.docs = [doc for doc in state.docs if doc.id != doc_id]
        self._save(state)

    def stats(self) -> DocBuilderStats:
        state = self.state()
        return DocBuilderStats(
            docs=len(state.docs),
            templates=len(state.templates),
            completed=sum(1 for doc in state.docs if doc.completed),
        )

    @staticmethod
    def _find(state: DocBuilderState, doc_id: str) -> Document:
        for doc in state.docs:
            if doc.id == doc_id:
                return doc
        raise KeyError(f"Document not found: {doc_id}")
