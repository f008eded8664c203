"""
CV generation pipeline and CV lifecycle.

One generation request runs strictly in sequence:
build prompt -> completion -> normalize -> validate -> persist -> render.
The completion call is awaited and rendering runs in a worker thread, so a
slow request never blocks other requests on the event loop.
"""
import json
import logging
from typing import Any, Dict, List, Tuple

from starlette.concurrency import run_in_threadpool

from .ai_services import CompletionClient
from .errors import CompletionFailed, CvTailorError, NotFound
from .extraction import HEURISTIC, ensure_document, extract_cv_document
from .models import Cv, Profile
from .prompts import PromptBuilder
from .rendering import CvRenderer
from .schemas import ProfileOut
from .store import CvStore

logger = logging.getLogger(__name__)


def profile_out(p: Profile) -> ProfileOut:
    return ProfileOut(
        id=p.id,
        profile_name=p.profile_name,
        email=p.email,
        full_name=p.full_name,
        title=p.title,
        phone=p.phone,
        location=p.location,
        summary=p.summary,
        skills=p.skills,
        links=p.links,
        education=p.education,
        experiences=p.experiences,
        projects=p.projects,
        activities=p.activities,
        volunteering=p.volunteering,
        certificates=p.certificates,
        created_at=p.created_at,
        updated_at=p.updated_at,
    )


def serialize_profile(p: Profile) -> str:
    """The profile record as the JSON text embedded in the prompt."""
    data = profile_out(p).model_dump(by_alias=True, mode="json", exclude_none=True)
    return json.dumps(data, ensure_ascii=False)


class CvService:
    def __init__(self, store: CvStore, prompt_builder: PromptBuilder, completion: CompletionClient,
                 renderer: CvRenderer, extraction_strategy: str = HEURISTIC):
        self.store = store
        self.prompt_builder = prompt_builder
        self.completion = completion
        self.renderer = renderer
        self.extraction_strategy = extraction_strategy

    async def _complete(self, prompt: str) -> str:
        try:
            raw = await self.completion.complete(prompt)
        except CvTailorError:
            raise
        except Exception as e:
            logger.error(f"Completion client raised: {e}")
            raise CompletionFailed(f"Completion failed: {e}") from e
        if not raw:
            raise CompletionFailed("Failed to generate CV data")
        return raw

    async def _render(self, document: Dict[str, Any]) -> bytes:
        return await run_in_threadpool(self.renderer.render, document)

    async def generate(self, profile_id: str, job_description: str) -> Tuple[Cv, bytes]:
        profile = self.store.get_profile(profile_id)
        prompt = self.prompt_builder.build(job_description, serialize_profile(profile))

        logger.info(f"Generating CV for profile {profile_id}")
        raw = await self._complete(prompt)
        document = extract_cv_document(raw, self.extraction_strategy)

        # Persist before rendering so a render failure still leaves an editable record
        cv_id = self.store.create_cv(profile_id, job_description, document)
        pdf = await self._render(document)
        pdf_path = self.store.write_pdf(cv_id, pdf)
        cv = self.store.set_pdf_path(cv_id, pdf_path)
        logger.info(f"Generated CV {cv_id} for profile {profile_id}")
        return cv, pdf

    def list_cvs(self) -> List[Cv]:
        return self.store.list_cvs()

    def list_cvs_for_profile(self, profile_id: str) -> List[Cv]:
        return self.store.list_cvs_for_profile(profile_id)

    def get_cv(self, cv_id: str) -> Cv:
        return self.store.get_cv(cv_id)

    def _store_pdf(self, cv: Cv, pdf: bytes) -> Cv:
        pdf_path = self.store.write_pdf(cv.id, pdf, cv.pdf_path)
        if pdf_path != cv.pdf_path:
            cv = self.store.set_pdf_path(cv.id, pdf_path)
        return cv

    async def update_document(self, cv_id: str, value: Any) -> Cv:
        document = ensure_document(value)
        cv = self.store.update_cv_document(cv_id, document)
        pdf = await self._render(document)
        return self._store_pdf(cv, pdf)

    async def regenerate(self, cv_id: str) -> bytes:
        cv = self.store.get_cv(cv_id)
        if cv.cv_data is None:
            raise NotFound("CV not found or no CV data available")
        pdf = await self._render(cv.cv_data)
        self._store_pdf(cv, pdf)
        return pdf

    def read_pdf(self, cv_id: str) -> bytes:
        cv = self.store.get_cv(cv_id)
        pdf = self.store.read_pdf(cv.pdf_path)
        if pdf is None:
            raise NotFound("CV not found")
        return pdf

    def delete(self, cv_id: str) -> None:
        cv = self.store.get_cv(cv_id)
        self.store.remove_pdf(cv.pdf_path)
        self.store.delete_cv(cv_id)
