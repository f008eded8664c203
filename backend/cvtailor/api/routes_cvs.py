from typing import Any, List

from fastapi import APIRouter, Body, Depends
from fastapi.responses import Response

from ..models import Cv
from ..schemas import CvOut, GenerateCvRequest, ProfileSummary
from ..services import CvService
from .deps import get_cv_service

router = APIRouter(prefix="/cvs", tags=["cvs"])


def cv_out(cv: Cv, with_profile: bool = False) -> CvOut:
    profile = None
    if with_profile and cv.profile is not None:
        profile = ProfileSummary(
            id=cv.profile.id,
            profile_name=cv.profile.profile_name,
            email=cv.profile.email,
            full_name=cv.profile.full_name,
        )
    return CvOut(
        id=cv.id,
        profile_id=cv.profile_id,
        job_description=cv.job_description,
        pdf_path=cv.pdf_path,
        cv_data=cv.cv_data,
        created_at=cv.created_at,
        updated_at=cv.updated_at,
        profile=profile,
    )


def pdf_response(pdf: bytes, disposition: str = "attachment", **headers: str) -> Response:
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f"{disposition}; filename=cv.pdf", **headers},
    )


@router.post("/generate")
async def generate_cv(body: GenerateCvRequest, service: CvService = Depends(get_cv_service)):
    """Generate a tailored CV and return it as a PDF attachment."""
    cv, pdf = await service.generate(body.profile_id, body.job_description)
    return pdf_response(pdf, **{"X-Cv-Id": cv.id})

@router.get("", response_model=List[CvOut])
def list_cvs(service: CvService = Depends(get_cv_service)):
    return [cv_out(cv, with_profile=True) for cv in service.list_cvs()]

@router.get("/profile/{profile_id}", response_model=List[CvOut])
def list_cvs_for_profile(profile_id: str, service: CvService = Depends(get_cv_service)):
    return [cv_out(cv) for cv in service.list_cvs_for_profile(profile_id)]

@router.get("/{cv_id}", response_model=CvOut)
def get_cv(cv_id: str, service: CvService = Depends(get_cv_service)):
    return cv_out(service.get_cv(cv_id), with_profile=True)

@router.patch("/{cv_id}/cv-data", response_model=CvOut)
async def update_cv_data(cv_id: str, cv_data: Any = Body(...), service: CvService = Depends(get_cv_service)):
    """Replace the stored document (manual edit) and re-render its PDF."""
    return cv_out(await service.update_document(cv_id, cv_data))

@router.get("/{cv_id}/regenerate")
async def regenerate_cv(cv_id: str, service: CvService = Depends(get_cv_service)):
    pdf = await service.regenerate(cv_id)
    return pdf_response(pdf, disposition="inline")

@router.get("/{cv_id}/download")
def download_cv(cv_id: str, service: CvService = Depends(get_cv_service)):
    return pdf_response(service.read_pdf(cv_id))

@router.delete("/{cv_id}", response_model=CvOut)
def delete_cv(cv_id: str, service: CvService = Depends(get_cv_service)):
    out = cv_out(service.get_cv(cv_id))
    service.delete(cv_id)
    return out
