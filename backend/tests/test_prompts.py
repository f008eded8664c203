import pytest

from cvtailor.config import DEFAULT_PROMPT_PATH
from cvtailor.errors import InvalidInput, TemplateUnavailable
from cvtailor.prompts import FileTemplateStore, PromptBuilder, StaticTemplateStore


def test_build_substitutes_both_markers_verbatim():
    builder = PromptBuilder(StaticTemplateStore("JD: {{jobDescription}}\nPROFILE: {{userProfile}}"))
    prompt = builder.build("Senior <Python> dev", '{"fullName": "A {{x}}"}')
    assert prompt == 'JD: Senior <Python> dev\nPROFILE: {"fullName": "A {{x}}"}'


def test_build_replaces_first_occurrence_only():
    builder = PromptBuilder(StaticTemplateStore("{{jobDescription}} / {{jobDescription}}"))
    assert builder.build("JD", "{}") == "JD / {{jobDescription}}"


@pytest.mark.parametrize("template", [None, ""])
def test_missing_template_is_unavailable(template):
    with pytest.raises(TemplateUnavailable):
        PromptBuilder(StaticTemplateStore(template)).build("JD", "{}")


def test_file_store_missing_file(tmp_path):
    builder = PromptBuilder(FileTemplateStore(str(tmp_path / "nope.md")))
    with pytest.raises(TemplateUnavailable):
        builder.build("JD", "{}")


def test_file_store_reads_template(tmp_path):
    path = tmp_path / "prompt.md"
    path.write_text("{{userProfile}} for {{jobDescription}}", encoding="utf-8")
    assert PromptBuilder(FileTemplateStore(str(path))).build("JD", "P") == "P for JD"


def test_packaged_template_has_both_markers():
    text = FileTemplateStore(str(DEFAULT_PROMPT_PATH)).load_template()
    assert "{{jobDescription}}" in text
    assert "{{userProfile}}" in text


def test_empty_job_description_rejected():
    with pytest.raises(InvalidInput) as exc:
        PromptBuilder(StaticTemplateStore("{{jobDescription}}")).build("", "{}")
    assert exc.value.status_code == 422
