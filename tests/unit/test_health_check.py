import json

from concierge import __version__
from concierge.handlers import health_check


def test_health_check_returns_ok():
    resp = health_check.lambda_handler({}, None)
    assert resp["statusCode"] == 200
    body = json.loads(resp["body"])
    assert body["status"] == "ok"
    assert body["version"] == __version__
    assert body["environment"] == "dev"
