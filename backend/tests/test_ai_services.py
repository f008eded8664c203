import asyncio

import httpx
import pytest

from cvtailor import ai_services
from cvtailor.ai_services import AIService
from cvtailor.config import Settings
from cvtailor.errors import CompletionFailed


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=""):
        self.status_code = status_code
        self._body = body
        self.text = text

    def json(self):
        if self._body is None:
            raise ValueError("no json")
        return self._body


def fake_client_factory(response=None, error=None, calls=None):
    class FakeAsyncClient:
        def __init__(self, *args, **kwargs):
            pass

        async def __aenter__(self):
            return self

        async def __aexit__(self, exc_type, exc, tb):
            return False

        async def post(self, url, json=None, headers=None):
            if calls is not None:
                calls.append({"url": url, "json": json, "headers": headers})
            if error is not None:
                raise error
            return response

    return FakeAsyncClient


def make_service(**overrides):
    params = dict(llm_api_key="secret", llm_base_url="https://llm.example/v1", llm_model="test-model")
    params.update(overrides)
    return AIService(Settings(**params))


def run(coro):
    return asyncio.run(coro)


def test_complete_returns_message_content(monkeypatch):
    calls = []
    body = {"choices": [{"message": {"content": '{"fullName": "A"}'}}]}
    monkeypatch.setattr(ai_services.httpx, "AsyncClient", fake_client_factory(FakeResponse(body=body), calls=calls))

    assert run(make_service().complete("PROMPT")) == '{"fullName": "A"}'

    sent = calls[0]
    assert sent["url"] == "https://llm.example/v1/chat/completions"
    assert sent["headers"]["Authorization"] == "Bearer secret"
    assert sent["json"]["model"] == "test-model"
    assert sent["json"]["messages"][-1] == {"role": "user", "content": "PROMPT"}
    assert sent["json"]["messages"][0]["role"] == "system"


@pytest.mark.parametrize("body", [
    {"choices": [{"message": {"content": ""}}]},
    {"choices": [{"message": {"content": None}}]},
    {"choices": []},
    {},
])
def test_empty_completion_fails(monkeypatch, body):
    monkeypatch.setattr(ai_services.httpx, "AsyncClient", fake_client_factory(FakeResponse(body=body)))
    with pytest.raises(CompletionFailed):
        run(make_service().complete("PROMPT"))


def test_http_error_status_fails(monkeypatch):
    resp = FakeResponse(status_code=429, text="rate limited")
    monkeypatch.setattr(ai_services.httpx, "AsyncClient", fake_client_factory(resp))
    with pytest.raises(CompletionFailed) as exc:
        run(make_service().complete("PROMPT"))
    assert "429" in exc.value.detail


def test_timeout_fails(monkeypatch):
    monkeypatch.setattr(ai_services.httpx, "AsyncClient", fake_client_factory(error=httpx.ReadTimeout("slow")))
    with pytest.raises(CompletionFailed) as exc:
        run(make_service().complete("PROMPT"))
    assert "timed out" in exc.value.detail


def test_connection_error_fails(monkeypatch):
    monkeypatch.setattr(ai_services.httpx, "AsyncClient", fake_client_factory(error=httpx.ConnectError("refused")))
    with pytest.raises(CompletionFailed):
        run(make_service().complete("PROMPT"))


def test_non_json_body_fails(monkeypatch):
    monkeypatch.setattr(ai_services.httpx, "AsyncClient", fake_client_factory(FakeResponse(body=None)))
    with pytest.raises(CompletionFailed):
        run(make_service().complete("PROMPT"))


def test_hung_call_is_bounded_by_timeout(monkeypatch):
    service = make_service(llm_timeout=0.05)

    async def never_returns(headers, payload):
        await asyncio.sleep(10)

    monkeypatch.setattr(service, "_post", never_returns)
    with pytest.raises(CompletionFailed):
        run(service.complete("PROMPT"))


def test_missing_api_key_for_remote_endpoint_fails():
    with pytest.raises(CompletionFailed):
        run(make_service(llm_api_key="").complete("PROMPT"))


def test_local_endpoint_does_not_need_key(monkeypatch):
    calls = []
    body = {"choices": [{"message": {"content": "{}"}}]}
    monkeypatch.setattr(ai_services.httpx, "AsyncClient", fake_client_factory(FakeResponse(body=body), calls=calls))
    service = make_service(llm_api_key="", llm_base_url="http://localhost:11434/v1")
    assert run(service.complete("PROMPT")) == "{}"
    assert "Authorization" not in calls[0]["headers"]
