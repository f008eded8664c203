"""
Prompt construction for CV generation.

The prompt is a fixed template with two markers, `{{jobDescription}}` and
`{{userProfile}}`, each substituted once. Values are embedded as-is.
"""
import logging
from pathlib import Path
from typing import Optional, Protocol

from .errors import InvalidInput, TemplateUnavailable

logger = logging.getLogger(__name__)

JOB_DESCRIPTION_MARKER = "{{jobDescription}}"
PROFILE_MARKER = "{{userProfile}}"


class TemplateStore(Protocol):
    def load_template(self) -> Optional[str]: ...


class FileTemplateStore:
    """Reads the prompt template from disk on every call so edits apply without a restart."""

    def __init__(self, path: str):
        self.path = Path(path)

    def load_template(self) -> Optional[str]:
        try:
            return self.path.read_text(encoding="utf-8")
        except OSError as e:
            logger.error(f"Prompt template unreadable at {self.path}: {e}")
            return None


class StaticTemplateStore:
    def __init__(self, template: Optional[str]):
        self.template = template

    def load_template(self) -> Optional[str]:
        return self.template


class PromptBuilder:
    def __init__(self, store: TemplateStore):
        self.store = store

    def build(self, job_description: str, profile: str) -> str:
        if not job_description:
            raise InvalidInput("Job description must be non-empty")
        template = self.store.load_template()
        if not template:
            raise TemplateUnavailable("Prompt template is missing or empty")
        return (
            template
            .replace(JOB_DESCRIPTION_MARKER, job_description, 1)
            .replace(PROFILE_MARKER, profile, 1)
        )
