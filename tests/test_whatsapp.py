import pytest
import requests

from services import whatsapp


@pytest.fixture
def green_api(monkeypatch):
    monkeypatch.setenv("GREEN_API_INSTANCE", "1101")
    monkeypatch.setenv("GREEN_API_TOKEN", "green-token")


@pytest.fixture
def ultramsg(monkeypatch):
    monkeypatch.setenv("ULTRAMSG_INSTANCE", "instance42")
    monkeypatch.setenv("ULTRAMSG_TOKEN", "ultra-token")


def test_clean_phone():
    assert whatsapp.clean_phone("+91 (987) 654-3210") == "+919876543210"


def test_not_configured_only_logs(caplog):
    with caplog.at_level("INFO"):
        result = whatsapp.send_whatsapp("Aarav", 1, "+91 98765 43210")
    assert result.outcome == whatsapp.LOGGED
    assert result.success
    assert result.message == "WhatsApp API not configured. Message logged."
    assert result.details["content"] == "Your child Aarav, roll no 1, is Absent today."
    assert "Your child Aarav" in caplog.text


def test_green_api_is_tried_first(green_api, ultramsg, monkeypatch, fake_response):
    calls = []

    def fake_post(url, **kwargs):
        calls.append((url, kwargs))
        return fake_response({"idMessage": "abc"})

    monkeypatch.setattr(whatsapp.requests, "post", fake_post)
    result = whatsapp.send_whatsapp("Aarav", 1, "+91 98765-43210")

    assert result.outcome == whatsapp.SENT
    assert result.provider == "green-api"
    assert len(calls) == 1
    url, kwargs = calls[0]
    assert url == "https://api.green-api.com/waInstance1101/sendMessage/green-token"
    assert kwargs["json"] == {"chatId": "+919876543210@c.us", "message": "Your child Aarav, roll no 1, is Absent today."}


def test_falls_back_to_ultramsg(green_api, ultramsg, monkeypatch, fake_response):
    calls = []

    def fake_post(url, **kwargs):
        calls.append(url)
        if "green-api" in url:
            raise requests.ConnectionError("green down")
        return fake_response({"sent": "true"})

    monkeypatch.setattr(whatsapp.requests, "post", fake_post)
    result = whatsapp.send_whatsapp("Diya", 2, "98765 43211")

    assert result.outcome == whatsapp.SENT
    assert result.provider == "ultramsg"
    assert result.message == "WhatsApp notification sent via ultramsg"
    assert calls[1] == "https://api.ultramsg.com/instance42/messages/chat"


def test_all_providers_failing(ultramsg, monkeypatch, fake_response):
    monkeypatch.setattr(whatsapp.requests, "post", lambda url, **kw: fake_response({}, status_code=503))
    result = whatsapp.send_whatsapp("Diya", 2, "98765 43211")
    assert result.outcome == whatsapp.FAILED
    assert not result.success
    assert result.message.startswith("ultramsg:")


# --- /functions/send-whatsapp ---

def test_function_missing_fields(client):
    res = client.post("/functions/send-whatsapp", json={"studentName": "Aarav", "rollNo": 1})
    assert res.status_code == 400
    assert res.json() == {"error": "Missing required fields"}


def test_function_logs_when_not_configured(client):
    res = client.post("/functions/send-whatsapp", json={"studentName": "Aarav", "rollNo": 1, "contact": "+91 98765 43210"})
    body = res.json()
    assert res.status_code == 200
    assert body["success"] is True
    assert body["message"] == "WhatsApp API not configured. Message logged."
    assert body["details"]["to"] == "+91 98765 43210"


def test_function_reports_provider_failure(client, green_api, monkeypatch):
    def boom(*args, **kwargs):
        raise requests.Timeout("timed out")

    monkeypatch.setattr(whatsapp.requests, "post", boom)
    res = client.post("/functions/send-whatsapp", json={"studentName": "Aarav", "rollNo": 1, "contact": "123"})
    assert res.status_code == 500
    assert res.json()["error"] == "Failed to send WhatsApp notification"
    assert "timed out" in res.json()["details"]


def test_function_wrong_method(client):
    res = client.get("/functions/send-whatsapp")
    assert res.status_code == 405
    assert res.json() == {"error": "Method not allowed"}


def test_notification_history(admin_client):
    admin_client.post("/functions/send-whatsapp", json={"studentName": "Aarav", "rollNo": 1, "contact": "123"})
    history = admin_client.get("/api/v1/notifications/history").json()
    assert len(history) == 1
    assert history[0]["outcome"] == "logged"
