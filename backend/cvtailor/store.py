"""
Persistence for CV records and their PDF files.

Records live in the SQL database; generated PDFs are written under
`FILES_DIR/cvs` and referenced by a path relative to `FILES_DIR`. Database
and filesystem errors surface as `PersistenceFailure`.
"""
import logging
import os
import time
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import NotFound, PersistenceFailure
from .models import Cv, Profile

logger = logging.getLogger(__name__)


class CvStore:
    def __init__(self, db: Session, files_dir: str):
        self.db = db
        self.files_dir = files_dir

    def commit(self, action: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to {action}: {e}")
            raise PersistenceFailure(f"Failed to {action}") from e

    # ----- records -----
    def list_profiles(self) -> List[Profile]:
        try:
            return self.db.query(Profile).order_by(Profile.created_at.desc()).all()
        except SQLAlchemyError as e:
            raise PersistenceFailure("Failed to list profiles") from e

    def save_profile(self, profile: Profile) -> Profile:
        self.db.add(profile)
        self.commit("save profile")
        self.db.refresh(profile)
        return profile

    def delete_profile(self, profile_id: str) -> None:
        profile = self.get_profile(profile_id)
        for cv in profile.cvs:
            self.remove_pdf(cv.pdf_path)
        self.db.delete(profile)
        self.commit("delete profile")

    def get_profile(self, profile_id: str) -> Profile:
        try:
            profile = self.db.get(Profile, profile_id)
        except SQLAlchemyError as e:
            raise PersistenceFailure("Failed to load profile") from e
        if not profile:
            raise NotFound("Profile not found")
        return profile

    def create_cv(self, profile_id: str, job_description: str, document: Dict[str, Any],
                  pdf_path: Optional[str] = None) -> str:
        cv = Cv(profile_id=profile_id, job_description=job_description, cv_data=document, pdf_path=pdf_path)
        self.db.add(cv)
        self.commit("create CV")
        return cv.id

    def get_cv(self, cv_id: str) -> Cv:
        try:
            cv = self.db.get(Cv, cv_id)
        except SQLAlchemyError as e:
            raise PersistenceFailure("Failed to load CV") from e
        if not cv:
            raise NotFound("CV not found")
        return cv

    def update_cv_document(self, cv_id: str, document: Dict[str, Any]) -> Cv:
        cv = self.get_cv(cv_id)
        cv.cv_data = document
        self.commit("update CV data")
        self.db.refresh(cv)
        return cv

    def set_pdf_path(self, cv_id: str, pdf_path: str) -> Cv:
        cv = self.get_cv(cv_id)
        cv.pdf_path = pdf_path
        self.commit("update CV file path")
        return cv

    def delete_cv(self, cv_id: str) -> None:
        cv = self.get_cv(cv_id)
        self.db.delete(cv)
        self.commit("delete CV")

    def list_cvs(self) -> List[Cv]:
        try:
            return self.db.query(Cv).order_by(Cv.created_at.desc()).all()
        except SQLAlchemyError as e:
            raise PersistenceFailure("Failed to list CVs") from e

    def list_cvs_for_profile(self, profile_id: str) -> List[Cv]:
        try:
            return (
                self.db.query(Cv)
                .filter(Cv.profile_id == profile_id)
                .order_by(Cv.created_at.desc())
                .all()
            )
        except SQLAlchemyError as e:
            raise PersistenceFailure("Failed to list CVs") from e

    # ----- files -----
    def _full_path(self, relative_path: str) -> str:
        return os.path.join(self.files_dir, relative_path)

    def write_pdf(self, cv_id: str, data: bytes, relative_path: Optional[str] = None) -> str:
        """Write PDF bytes; reuses `relative_path` when given, else picks a new name."""
        if not relative_path:
            filename = f"cv_{cv_id}_{int(time.time() * 1000)}.pdf"
            relative_path = os.path.join("cvs", filename)
        full_path = self._full_path(relative_path)
        try:
            os.makedirs(os.path.dirname(full_path), exist_ok=True)
            with open(full_path, "wb") as f:
                f.write(data)
        except OSError as e:
            logger.error(f"Failed to write PDF {full_path}: {e}")
            raise PersistenceFailure("Failed to store PDF file") from e
        return relative_path

    def read_pdf(self, relative_path: Optional[str]) -> Optional[bytes]:
        if not relative_path:
            return None
        full_path = self._full_path(relative_path)
        if not os.path.exists(full_path):
            return None
        try:
            with open(full_path, "rb") as f:
                return f.read()
        except OSError as e:
            raise PersistenceFailure("Failed to read PDF file") from e

    def remove_pdf(self, relative_path: Optional[str]) -> None:
        if not relative_path:
            return
        full_path = self._full_path(relative_path)
        try:
            if os.path.exists(full_path):
                os.remove(full_path)
        except OSError as e:
            raise PersistenceFailure("Failed to delete PDF file") from e
