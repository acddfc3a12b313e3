import httpx
import pytest
from fastapi import HTTPException

from app.modules.generation import deepseek_client
from app.modules.generation.deepseek_client import DeepSeekClient
from app.modules.generation.prompts import build_system_prompt, canonical_template_type
from app.modules.generation.service import word_count
from app.modules.generation.templates import build_user_prompt, supported_templates
from tests.conftest import add_profile


def test_word_count_counts_whitespace_separated_tokens():
    assert word_count("Hello   world\nagain") == 3
    assert word_count("") == 0
    assert word_count(None) == 0


def test_system_prompt_includes_language_and_keywords():
    prompt = build_system_prompt("blog", "fr", ["seo", "growth"])
    assert "expert blog writer" in prompt
    assert "Generate content in French." in prompt
    assert "Incorporate these keywords naturally: seo, growth" in prompt


def test_system_prompt_falls_back_to_default_writer():
    prompt = build_system_prompt("something-new", None)
    assert prompt.startswith("You are a professional content writer.")
    assert "Generate content in English." in prompt


def test_template_aliases():
    assert canonical_template_type("cover_letter") == "letter"
    assert canonical_template_type("blog") == "blog"


def test_user_prompt_passthrough_for_plain_templates():
    assert build_user_prompt("blog", "Ten tips for remote teams") == "Ten tips for remote teams"


def test_cover_letter_requires_job_title():
    with pytest.raises(HTTPException) as exc:
        build_user_prompt("cover-letter", "Five years of backend work", {})
    assert exc.value.status_code == 400
    assert "job_title" in exc.value.detail

    prompt = build_user_prompt("cover-letter", "Five years of backend work", {"job_title": "Engineer"})
    assert "Engineer position" in prompt
    assert "Five years of backend work" in prompt


def test_templates_endpoint_lists_builders(client):
    response = client.get("/api/v1/generations/templates")
    assert response.status_code == 200
    assert response.json() == supported_templates()


def test_generate_requires_template_and_prompt(client):
    response = client.post("/api/v1/generations", json={"template_type": "blog", "prompt": "  "})
    assert response.status_code == 400
    assert response.json()["detail"] == "Template type and prompt are required"


def test_generate_blocked_when_word_limit_reached(client, fake_db, generation_client):
    add_profile(fake_db, words_used=500, words_limit=500)

    response = client.post("/api/v1/generations", json={"template_type": "blog", "prompt": "AI trends"})

    assert response.status_code == 402
    assert generation_client.calls == []


def test_generate_records_content_and_charges_words(client, fake_db, generation_client):
    add_profile(fake_db, words_used=10, words_limit=500)

    response = client.post("/api/v1/generations", json={
        "template_type": "blog",
        "prompt": "AI trends",
        "language": "es",
        "keywords": ["ai"],
    })

    assert response.status_code == 200
    body = response.json()
    assert body["word_count"] == 5
    assert body["words_used"] == 15
    assert body["words_limit"] == 500

    rows = fake_db.rows("content_generations")
    assert len(rows) == 1
    assert rows[0]["generated_content"] == generation_client.content
    assert rows[0]["language"] == "es"
    assert fake_db.rows("profiles")[0]["words_used"] == 15

    system_prompt, user_prompt = generation_client.calls[0]
    assert "Spanish" in system_prompt
    assert user_prompt == "AI trends"


def test_generate_creates_missing_profile(client, fake_db):
    response = client.post("/api/v1/generations", json={"template_type": "blog", "prompt": "AI trends"})

    assert response.status_code == 200
    profiles = fake_db.rows("profiles")
    assert len(profiles) == 1
    assert profiles[0]["subscription_plan"] == "free"
    assert profiles[0]["words_limit"] == 500
    assert profiles[0]["display_name"] == "Writer"


def test_recent_generations_filtered_by_template(client, fake_db):
    add_profile(fake_db, words_limit=100000)
    for prompt in ("first", "second"):
        client.post("/api/v1/generations", json={"template_type": "blog", "prompt": prompt})
    client.post("/api/v1/generations", json={"template_type": "ads", "prompt": "third"})

    response = client.get("/api/v1/generations", params={"template_type": "blog"})

    assert response.status_code == 200
    assert [g["prompt"] for g in response.json()] == ["second", "first"]
    assert len(client.get("/api/v1/generations").json()) == 3


def test_delete_generation(client, fake_db):
    add_profile(fake_db)
    created = client.post("/api/v1/generations", json={"template_type": "blog", "prompt": "x"}).json()

    assert client.delete(f"/api/v1/generations/{created['id']}").status_code == 204
    assert fake_db.rows("content_generations") == []
    missing = client.delete(f"/api/v1/generations/{created['id']}")
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Content not found"


def test_client_without_api_key_fails_with_500():
    with pytest.raises(HTTPException) as exc:
        DeepSeekClient(api_key="").complete("system", "user")
    assert exc.value.status_code == 500
    assert exc.value.detail == "API key not configured"


def _reply(monkeypatch, response=None, error=None):
    calls = []

    def fake_post(url, **kwargs):
        calls.append((url, kwargs))
        if error is not None:
            raise error
        return response

    monkeypatch.setattr(deepseek_client.httpx, "post", fake_post)
    return calls


def test_client_sends_chat_completion_request(monkeypatch):
    calls = _reply(monkeypatch, httpx.Response(200, json={"choices": [{"message": {"content": "Draft"}}]}))

    assert DeepSeekClient(api_key="k", base_url="https://llm.example/").complete("sys", "usr") == "Draft"

    url, kwargs = calls[0]
    assert url == "https://llm.example/chat/completions"
    assert kwargs["headers"]["Authorization"] == "Bearer k"
    assert kwargs["json"]["messages"] == [
        {"role": "system", "content": "sys"},
        {"role": "user", "content": "usr"},
    ]
    assert kwargs["json"]["max_tokens"] == 2048
    assert kwargs["json"]["stream"] is False


@pytest.mark.parametrize("response,detail", [
    (httpx.Response(429, text="slow down"), "API error: 429"),
    (httpx.Response(500, json={"error": "boom"}), "API error: 500"),
    (httpx.Response(200, json={"choices": []}), "Unexpected API response format"),
    (httpx.Response(200, json=[{"message": {"content": "x"}}]), "Unexpected API response format"),
    (httpx.Response(200, text="<html>oops</html>"), "Unexpected API response format"),
])
def test_client_maps_bad_replies_to_502(monkeypatch, response, detail):
    _reply(monkeypatch, response)

    with pytest.raises(HTTPException) as exc:
        DeepSeekClient(api_key="k").complete("system", "user")

    assert exc.value.status_code == 502
    assert exc.value.detail == detail


def test_client_transport_failure_is_502(monkeypatch):
    _reply(monkeypatch, error=httpx.ConnectError("connection refused"))

    with pytest.raises(HTTPException) as exc:
        DeepSeekClient(api_key="k").complete("system", "user")

    assert exc.value.status_code == 502
    assert exc.value.detail == "Generation service unavailable"
