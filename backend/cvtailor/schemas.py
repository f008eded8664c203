from datetime import datetime
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, WrapValidator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Entry(CamelModel):
    # Unknown keys are kept in `model_extra` and written back verbatim.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


# ----- Profile entry records -----
class LinkEntry(Entry):
    type: str
    url: str

class EducationEntry(Entry):
    school_name: str
    degree: Optional[str] = None
    field_of_study: Optional[str] = None
    grade: Optional[str] = None
    location: Optional[str] = None
    start_date: str
    end_date: Optional[str] = None
    currently_studying: Optional[bool] = None
    description: Optional[str] = None

class ExperienceEntry(Entry):
    job_title: str
    company_name: str
    employment_type: Optional[str] = None
    location: Optional[str] = None
    links: Optional[List[LinkEntry]] = None
    start_date: str
    end_date: Optional[str] = None
    currently_working: Optional[bool] = None
    description: Optional[str] = None

class ProjectEntry(Entry):
    title: str
    description: Optional[str] = None
    technologies: Optional[List[str]] = None
    links: Optional[List[LinkEntry]] = None
    start_date: str
    end_date: Optional[str] = None
    currently_ongoing: Optional[bool] = None

class ActivityEntry(Entry):
    title: str
    role: Optional[str] = None
    start_date: str
    end_date: Optional[str] = None
    currently_ongoing: Optional[bool] = None
    description: Optional[str] = None

class VolunteeringEntry(Entry):
    organization_name: str
    role: Optional[str] = None
    location: Optional[str] = None
    start_date: str
    end_date: Optional[str] = None
    currently_volunteering: Optional[bool] = None
    description: Optional[str] = None

class CertificateEntry(Entry):
    name: str
    issuer: Optional[str] = None
    date: Optional[str] = None
    url: Optional[str] = None
    summary: Optional[str] = None


# ----- Profiles -----
class ProfileFields(CamelModel):
    full_name: Optional[str] = None
    title: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    summary: Optional[str] = None
    skills: Optional[List[str]] = None
    links: Optional[List[LinkEntry]] = None
    education: Optional[List[EducationEntry]] = None
    experiences: Optional[List[ExperienceEntry]] = None
    projects: Optional[List[ProjectEntry]] = None
    activities: Optional[List[ActivityEntry]] = None
    volunteering: Optional[List[VolunteeringEntry]] = None
    certificates: Optional[List[CertificateEntry]] = None

    def to_columns(self) -> Dict[str, Any]:
        """Only the fields the client sent, with entries in their stored (camelCase) form."""
        data: Dict[str, Any] = {}
        for name in self.model_fields_set:
            value = getattr(self, name)
            if isinstance(value, list):
                value = [
                    v.model_dump(by_alias=True, exclude_none=True) if isinstance(v, BaseModel) else v
                    for v in value
                ]
            data[name] = value
        return data

class ProfileCreate(ProfileFields):
    profile_name: str = Field(min_length=1)
    email: str = Field(min_length=1)

class ProfileUpdate(ProfileFields):
    profile_name: Optional[str] = None
    email: Optional[str] = None

class ProfileOut(CamelModel):
    id: str
    profile_name: str
    email: str
    full_name: Optional[str] = None
    title: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    summary: Optional[str] = None
    skills: Optional[List[str]] = None
    links: Optional[List[Dict[str, Any]]] = None
    education: Optional[List[Dict[str, Any]]] = None
    experiences: Optional[List[Dict[str, Any]]] = None
    projects: Optional[List[Dict[str, Any]]] = None
    activities: Optional[List[Dict[str, Any]]] = None
    volunteering: Optional[List[Dict[str, Any]]] = None
    certificates: Optional[List[Dict[str, Any]]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ----- CVs -----
class GenerateCvRequest(CamelModel):
    profile_id: str
    job_description: str = Field(min_length=1)

class ProfileSummary(CamelModel):
    id: str
    profile_name: Optional[str] = None
    email: Optional[str] = None
    full_name: Optional[str] = None

class CvOut(CamelModel):
    id: str
    profile_id: str
    job_description: str
    pdf_path: Optional[str] = None
    cv_data: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    profile: Optional[ProfileSummary] = None


# ----- Generated CV documents -----
def _keep_on_error(value: Any, handler) -> Any:
    # Values that don't fit the typed shape stay as they came in
    try:
        return handler(value)
    except ValidationError:
        return value

Lenient = WrapValidator(_keep_on_error)

class CvDocument(Entry):
    """Typed view over a generated CV document.

    Validated strictly so nothing is coerced; any field or entry that doesn't
    fit is kept verbatim. `to_document()` gives back the original keys and
    values, with absent fields still absent.
    """
    full_name: Annotated[Optional[str], Lenient] = None
    title: Annotated[Optional[str], Lenient] = None
    email: Annotated[Optional[str], Lenient] = None
    phone: Annotated[Optional[str], Lenient] = None
    location: Annotated[Optional[str], Lenient] = None
    summary: Annotated[Optional[str], Lenient] = None
    skills: Annotated[Optional[List[str]], Lenient] = None
    links: Annotated[Optional[List[Annotated[LinkEntry, Lenient]]], Lenient] = None
    education: Annotated[Optional[List[Annotated[EducationEntry, Lenient]]], Lenient] = None
    experiences: Annotated[Optional[List[Annotated[ExperienceEntry, Lenient]]], Lenient] = None
    projects: Annotated[Optional[List[Annotated[ProjectEntry, Lenient]]], Lenient] = None
    activities: Annotated[Optional[List[Annotated[ActivityEntry, Lenient]]], Lenient] = None
    volunteering: Annotated[Optional[List[Annotated[VolunteeringEntry, Lenient]]], Lenient] = None
    certificates: Annotated[Optional[List[Annotated[CertificateEntry, Lenient]]], Lenient] = None

    def to_document(self) -> Dict[str, Any]:
        # warnings off: verbatim fallbacks don't match their declared types
        return self.model_dump(by_alias=True, exclude_unset=True, warnings=False)

def typed_document(document: Dict[str, Any]) -> CvDocument:
    return CvDocument.model_validate(document, strict=True)
