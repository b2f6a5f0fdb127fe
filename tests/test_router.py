from main import app

from fastapi.testclient import TestClient
import pytest


@pytest.fixture(scope="module")
def client():
    with TestClient(app) as client:
        yield client


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_render(client):
    response = client.post("/api/markup/render", json={"content": "[b]hi[/b] <script>alert(1)</script>"})
    assert response.status_code == 200
    html = response.json()["html"]
    assert "<strong>hi</strong>" in html
    assert "<script" not in html


def test_render_rejects_oversized_content(client):
    response = client.post("/api/markup/render", json={"content": "x" * 60001})
    assert response.status_code == 422
    assert "error" in response.json()


def test_validate_valid_markup_returns_preview(client):
    response = client.post("/api/markup/validate", json={"content": "[b]x[/b]"})
    assert response.status_code == 200
    body = response.json()
    assert body["valid"] is True
    assert body["errors"] == []
    assert body["preview"]["raw"] == "[b]x[/b]"
    assert body["preview"]["html"].startswith('<div class="bbcode">')
    assert "<strong>x</strong>" in body["preview"]["html"]


def test_validate_invalid_markup(client):
    response = client.post("/api/markup/validate", json={"content": "[b]x"})
    assert response.status_code == 200
    assert response.json() == {
        "valid": False,
        "errors": ["Unclosed tag: [b]"],
        "preview": {"raw": "[b]x", "html": ""},
    }


def test_validate_empty_content_is_reported(client):
    response = client.post("/api/markup/validate", json={"content": "  "})
    body = response.json()
    assert body["valid"] is False
    assert body["errors"] == ["Content cannot be empty."]


def test_preview(client):
    response = client.post("/api/markup/preview", json={"content": "[b]hello[/b] [i]world[/i]"})
    assert response.json() == {"text": "hello world"}

    response = client.post("/api/markup/preview", json={"content": "one two three four", "max_length": 12})
    assert response.json() == {"text": "one two..."}


def test_preview_rejects_tiny_max_length(client):
    response = client.post("/api/markup/preview", json={"content": "x", "max_length": 3})
    assert response.status_code == 422


def test_to_markup(client):
    response = client.post("/api/markup/to-markup", json={"html": "<p><strong>a</strong><br>b</p>"})
    assert response.json() == {"markup": "[b]a[/b]\nb"}


def test_process_post(client):
    response = client.post("/api/markup/post", json={"content": "[i]hey[/i]"})
    assert response.status_code == 200
    body = response.json()
    assert body["raw"] == "[i]hey[/i]"
    assert "<em>hey</em>" in body["html"]


def test_process_strict_post(client):
    response = client.post("/api/markup/post", json={"content": "[quote]x", "strict": True})
    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["code"] == "bbcode_validation_error"
    assert "Unclosed tag: [quote]" in detail["error"]


def test_process_empty_post(client):
    response = client.post("/api/markup/post", json={"content": ""})
    assert response.status_code == 422
    assert response.json() == {"detail": {"error": "Content cannot be empty.", "code": "content_empty"}}
