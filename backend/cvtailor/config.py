"""
Runtime configuration for the CV tailoring backend.

Values come from the process environment (optionally seeded from a `.env`
file). A `Settings` instance is built once and handed to the components
that need it; only the database engine reads its URL at import.
"""
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import List

from dotenv import load_dotenv

from .extraction import HEURISTIC, STRATEGIES

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_PROMPT_PATH = PACKAGE_DIR / "templates" / "prompt.md"

DEFAULT_SYSTEM_PROMPT = "you are a technical recruiter with expertise in software development roles."


def _split_origins(raw: str) -> List[str]:
    origins = [o.strip() for o in (raw or "").split(",") if o.strip()]
    if not origins:
        # Sensible default for local dev (Vite 5173, Next.js 3000)
        origins = ["http://localhost:5173", "http://localhost:3000"]
    return origins


@dataclass
class Settings:
    llm_api_key: str = ""
    llm_base_url: str = "https://api.groq.com/openai/v1"
    llm_model: str = "llama-3.1-8b-instant"
    llm_temperature: float = 0.7
    llm_timeout: float = 60.0
    llm_system_prompt: str = DEFAULT_SYSTEM_PROMPT
    prompt_template_path: str = str(DEFAULT_PROMPT_PATH)
    database_url: str = "sqlite:///./cvtailor.db"
    files_dir: str = "./files"
    cors_origins: List[str] = field(default_factory=lambda: _split_origins(""))
    json_extraction: str = HEURISTIC
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Build settings from the environment, loading `.env` first."""
    load_dotenv()
    json_extraction = os.getenv("JSON_EXTRACTION", HEURISTIC).strip().lower()
    if json_extraction not in STRATEGIES:
        raise ValueError(f"JSON_EXTRACTION must be one of {', '.join(STRATEGIES)}, got {json_extraction!r}")
    return Settings(
        llm_api_key=os.getenv("LLM_API_KEY") or os.getenv("GROQ_API_KEY", ""),
        llm_base_url=os.getenv("LLM_BASE_URL", "https://api.groq.com/openai/v1").rstrip("/"),
        llm_model=os.getenv("LLM_MODEL", "llama-3.1-8b-instant"),
        llm_temperature=float(os.getenv("LLM_TEMPERATURE", "0.7")),
        llm_timeout=float(os.getenv("LLM_TIMEOUT", "60")),
        llm_system_prompt=os.getenv("LLM_SYSTEM_PROMPT", DEFAULT_SYSTEM_PROMPT),
        prompt_template_path=os.getenv("PROMPT_TEMPLATE_PATH", str(DEFAULT_PROMPT_PATH)),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./cvtailor.db"),
        files_dir=os.getenv("FILES_DIR", "./files"),
        cors_origins=_split_origins(os.getenv("CORS_ORIGINS", "")),
        json_extraction=json_extraction,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()
