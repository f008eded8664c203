from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from ..ai_services import CompletionClient, get_ai_service
from ..config import Settings, get_settings
from ..db import get_db
from ..prompts import FileTemplateStore, PromptBuilder
from ..rendering import CvRenderer
from ..services import CvService
from ..store import CvStore


def get_store(db: Session = Depends(get_db), settings: Settings = Depends(get_settings)) -> CvStore:
    return CvStore(db, settings.files_dir)

def get_completion_client(settings: Settings = Depends(get_settings)) -> CompletionClient:
    return get_ai_service(settings)

def get_prompt_builder(settings: Settings = Depends(get_settings)) -> PromptBuilder:
    return PromptBuilder(FileTemplateStore(settings.prompt_template_path))

@lru_cache
def get_renderer() -> CvRenderer:
    return CvRenderer()

def get_cv_service(
    store: CvStore = Depends(get_store),
    prompt_builder: PromptBuilder = Depends(get_prompt_builder),
    completion: CompletionClient = Depends(get_completion_client),
    renderer: CvRenderer = Depends(get_renderer),
    settings: Settings = Depends(get_settings),
) -> CvService:
    return CvService(store, prompt_builder, completion, renderer, settings.json_extraction)
