import json

from concierge.handlers import main


def test_main_routes_health(monkeypatch):
    monkeypatch.setattr(main.health_check, "lambda_handler", lambda e, c: {"status": "ok"})
    event = {"requestContext": {"http": {"method": "GET", "path": "/health"}}}
    resp = main.lambda_handler(event, None)
    assert resp["status"] == "ok"


def test_main_routes_respond(monkeypatch):
    marker = {}

    def fake_handler(event, context):
        marker["called"] = True
        return {"statusCode": 200}

    monkeypatch.setattr(main.respond, "lambda_handler", fake_handler)
    event = {"requestContext": {"http": {"method": "POST", "path": "/messages/respond"}}}
    resp = main.lambda_handler(event, None)
    assert resp["statusCode"] == 200
    assert marker["called"] is True


def test_main_routes_classify(monkeypatch):
    monkeypatch.setattr(main.classification, "lambda_handler", lambda e, c: {"classified": True})
    event = {"requestContext": {"http": {"method": "POST", "path": "/intents/classify"}}}
    resp = main.lambda_handler(event, None)
    assert resp["classified"] is True


def test_main_routes_knowledge_subpaths(monkeypatch):
    seen = []
    monkeypatch.setattr(
        main.knowledge, "lambda_handler", lambda e, c: seen.append(e["requestContext"]["http"]["path"]) or {}
    )
    for method, path in [
        ("GET", "/knowledge"),
        ("GET", "/knowledge/stats"),
        ("POST", "/knowledge/search"),
        ("PUT", "/knowledge/knowledge_1"),
        ("DELETE", "/knowledge/knowledge_1"),
    ]:
        main.lambda_handler({"requestContext": {"http": {"method": method, "path": path}}}, None)
    assert len(seen) == 5


def test_main_method_is_case_insensitive(monkeypatch):
    monkeypatch.setattr(main.health_check, "lambda_handler", lambda e, c: {"status": "ok"})
    event = {"requestContext": {"http": {"method": "get", "path": "/health"}}}
    assert main.lambda_handler(event, None)["status"] == "ok"


def test_main_unknown_route():
    event = {"requestContext": {"http": {"method": "GET", "path": "/unknown"}}}
    resp = main.lambda_handler(event, None)
    assert resp["statusCode"] == 404
    body = json.loads(resp["body"])
    assert body["message"] == "Route not found"


def test_main_wrong_method():
    event = {"requestContext": {"http": {"method": "DELETE", "path": "/messages/respond"}}}
    assert main.lambda_handler(event, None)["statusCode"] == 404
