"""
CV document -> PDF.

`build_sections` lays a document out as named sections of typed blocks in a
fixed order. Sections whose field is absent or empty are left out entirely.
The document is read through its typed view (`typed_document`); entries that
don't fit their record type are still read for whatever known keys they carry.
`CvRenderer` turns that layout into HTML with Jinja2 and into PDF bytes with
WeasyPrint. Only fields the layout knows about are displayed; anything else
in the document is ignored.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape
from pydantic import BaseModel
from pydantic.alias_generators import to_snake

from .config import PACKAGE_DIR
from .errors import RenderFailure
from .schemas import CvDocument, typed_document

# WeasyPrint is optional at import time; server should still boot without it
try:
    from weasyprint import HTML  # type: ignore
except Exception:  # pragma: no cover - environment without weasyprint
    HTML = None  # type: ignore

logger = logging.getLogger(__name__)

SEPARATOR = "  •  "
LINK_SEPARATOR = "  |  "
DATE_DASH = " – "
PRESENT = "Present"


@dataclass
class Link:
    label: str
    url: str


@dataclass
class Paragraph:
    text: str
    style: str = "body"
    kind: str = field(default="paragraph", init=False)


@dataclass
class Inline:
    """One line of text fragments and links joined by a separator."""
    parts: List[Union[str, Link]]
    separator: str = SEPARATOR
    style: str = "body"
    kind: str = field(default="inline", init=False)


@dataclass
class Row:
    """Two-column row: title lines on the left, date lines on the right."""
    left: List[Paragraph]
    right: List[Paragraph]
    kind: str = field(default="row", init=False)


Block = Union[Paragraph, Inline, Row]

# A typed entry, or one kept verbatim because it did not fit its type
Item = Union[BaseModel, Dict[str, Any]]


@dataclass
class Section:
    key: str
    heading: Optional[str]
    blocks: List[Block]


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def _value(item: Any, key: str) -> Any:
    # Typed entries and entries kept verbatim read the same way
    if isinstance(item, BaseModel):
        return getattr(item, to_snake(key), None)
    if isinstance(item, dict):
        return item.get(key)
    return None


def _entries(document: CvDocument, key: str) -> List[Item]:
    # Absent or non-list sections iterate as empty
    value = _value(document, key)
    if not isinstance(value, list):
        return []
    return [e for e in value if isinstance(e, (BaseModel, dict))]


def _strings(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [_text(v) for v in value if _text(v)]


def _links(value: Any) -> List[Link]:
    if not isinstance(value, list):
        return []
    links = []
    for item in value:
        if not isinstance(item, (BaseModel, dict)):
            continue
        label = _text(_value(item, "type")) or _text(_value(item, "url"))
        if label:
            links.append(Link(label=label, url=_text(_value(item, "url"))))
    return links


def format_date_range(entry: Item, ongoing_flag: str) -> str:
    """`start – end`, or `start – Present` when the ongoing flag is set.

    The ongoing flag wins over any `endDate` that is also present.
    """
    start = _text(_value(entry, "startDate"))
    end = PRESENT if _value(entry, ongoing_flag) else _text(_value(entry, "endDate"))
    if not end:
        return start
    return f"{start}{DATE_DASH}{end}"


def _with_location(name: str, location: str) -> str:
    return f"{name} | {location}" if location else name


def _description(entry: Item) -> List[Block]:
    text = _text(_value(entry, "description"))
    return [Paragraph(text, style="description")] if text else []


def _link_line(entry: Item) -> List[Block]:
    links = _links(_value(entry, "links"))
    return [Inline(list(links), separator=LINK_SEPARATOR, style="entryLinks")] if links else []


def _header(document: CvDocument) -> Section:
    name = _text(_value(document, "fullName"))
    blocks: List[Block] = [Paragraph(name.upper() if name else "N/A", style="name")]
    title = _text(_value(document, "title"))
    if title:
        blocks.append(Paragraph(title, style="title"))
    contact: List[Union[str, Link]] = []
    email = _text(_value(document, "email"))
    if email:
        contact.append(Link(label=email, url=f"mailto:{email}"))
    for key in ("phone", "location"):
        value = _text(_value(document, key))
        if value:
            contact.append(value)
    if contact:
        blocks.append(Inline(contact, style="contact"))
    return Section("header", None, blocks)


def _experience_blocks(exp: Item) -> List[Block]:
    right = [Paragraph(format_date_range(exp, "currentlyWorking"), style="date")]
    employment_type = _text(_value(exp, "employmentType"))
    if employment_type:
        right.append(Paragraph(employment_type, style="employmentType"))
    row = Row(
        left=[
            Paragraph(_text(_value(exp, "jobTitle")), style="entryTitle"),
            Paragraph(_with_location(_text(_value(exp, "companyName")), _text(_value(exp, "location"))), style="entrySubtitle"),
        ],
        right=right,
    )
    return [row] + _link_line(exp) + _description(exp)


def _project_blocks(project: Item) -> List[Block]:
    blocks: List[Block] = [Row(
        left=[Paragraph(_text(_value(project, "title")), style="entryTitle")],
        right=[Paragraph(format_date_range(project, "currentlyOngoing"), style="date")],
    )]
    blocks += _description(project)
    blocks += _link_line(project)
    technologies = _strings(_value(project, "technologies"))
    if technologies:
        blocks.append(Paragraph(f"Technologies: {', '.join(technologies)}", style="technologies"))
    return blocks


def _education_blocks(edu: Item) -> List[Block]:
    degree = _text(_value(edu, "degree"))
    field_of_study = _text(_value(edu, "fieldOfStudy"))
    title = " in ".join(p for p in (degree, field_of_study) if p)
    left = []
    if title:
        left.append(Paragraph(title, style="entryTitle"))
    left.append(Paragraph(
        _with_location(_text(_value(edu, "schoolName")), _text(_value(edu, "location"))),
        style="entrySubtitle" if title else "entryTitle",
    ))
    grade = _text(_value(edu, "grade"))
    if grade:
        left.append(Paragraph(f"Grade: {grade}", style="entrySubtitle"))
    row = Row(left=left, right=[Paragraph(format_date_range(edu, "currentlyStudying"), style="date")])
    return [row] + _description(edu)


def _activity_blocks(activity: Item) -> List[Block]:
    left = [Paragraph(_text(_value(activity, "title")), style="entryTitle")]
    role = _text(_value(activity, "role"))
    if role:
        left.append(Paragraph(role, style="entrySubtitle"))
    row = Row(left=left, right=[Paragraph(format_date_range(activity, "currentlyOngoing"), style="date")])
    return [row] + _description(activity)


def _volunteering_blocks(vol: Item) -> List[Block]:
    row = Row(
        left=[
            Paragraph(_text(_value(vol, "role")), style="entryTitle"),
            Paragraph(_with_location(_text(_value(vol, "organizationName")), _text(_value(vol, "location"))), style="entrySubtitle"),
        ],
        right=[Paragraph(format_date_range(vol, "currentlyVolunteering"), style="date")],
    )
    return [row] + _description(vol)


def _certificate_blocks(cert: Item) -> List[Block]:
    left = [Paragraph(_text(_value(cert, "name")), style="entryTitle")]
    issuer = _text(_value(cert, "issuer"))
    if issuer:
        left.append(Paragraph(issuer, style="entrySubtitle"))
    blocks: List[Block] = [Row(left=left, right=[Paragraph(_text(_value(cert, "date")), style="date")])]
    url = _text(_value(cert, "url"))
    if url:
        blocks.append(Inline([Link(label=url, url=url)], style="entryLinks"))
    summary = _text(_value(cert, "summary"))
    if summary:
        blocks.append(Paragraph(summary, style="description"))
    return blocks


ENTRY_SECTIONS = [
    ("experiences", "PROFESSIONAL EXPERIENCE", _experience_blocks),
    ("projects", "PROJECTS", _project_blocks),
    ("education", "EDUCATION", _education_blocks),
    ("activities", "ACTIVITIES", _activity_blocks),
    ("volunteering", "VOLUNTEERING", _volunteering_blocks),
    ("certificates", "CERTIFICATES", _certificate_blocks),
]


def build_sections(document: Dict[str, Any]) -> List[Section]:
    doc = typed_document(document)
    sections = [_header(doc)]

    links = _links(_value(doc, "links"))
    if links:
        sections.append(Section("links", None, [Inline(list(links), style="links")]))

    summary = _text(_value(doc, "summary"))
    if summary:
        sections.append(Section("summary", "SUMMARY", [Paragraph(summary, style="description")]))

    skills = _strings(_value(doc, "skills"))
    if skills:
        sections.append(Section("skills", "SKILLS", [Paragraph(SEPARATOR.join(skills))]))

    for key, heading, entry_blocks in ENTRY_SECTIONS:
        entries = _entries(doc, key)
        if not entries:
            continue
        blocks: List[Block] = []
        for entry in entries:
            blocks.extend(entry_blocks(entry))
        sections.append(Section(key, heading, blocks))

    return sections


class CvRenderer:
    """Renders CV documents to PDF through an HTML template."""

    def __init__(self, template_dir: Optional[str] = None, template_name: str = "cv.html"):
        env = Environment(
            loader=FileSystemLoader(template_dir or str(PACKAGE_DIR / "templates")),
            autoescape=select_autoescape(["html"]),
        )
        self.template = env.get_template(template_name)

    def render_html(self, document: Dict[str, Any]) -> str:
        return self.template.render(sections=build_sections(document))

    def render(self, document: Dict[str, Any]) -> bytes:
        if HTML is None:
            raise RenderFailure("WeasyPrint is not installed. Install 'weasyprint' to enable PDF rendering.")
        try:
            html = self.render_html(document)
            return HTML(string=html).write_pdf()
        except RenderFailure:
            raise
        except Exception as e:
            logger.error(f"PDF rendering failed: {e}")
            raise RenderFailure(f"PDF rendering failed: {e}") from e
