from __future__ import annotations

import os

import pytest
from fastapi.testclient import TestClient

from tradeassist.main import app

# Skip this module if no API key is configured (avoids flaky CI without secrets)
if not os.environ.get("OPENAI_API_KEY"):
    pytest.skip("OPENAI_API_KEY not set, skipping LLM smoke test", allow_module_level=True)


def test_unknown_trade_gets_generated_reply() -> None:
    client = TestClient(app)
    resp = client.post(
        "/test/inbound",
        json={"From": "+61412345678", "Body": "roofer"},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    # reply is an LLM answer, not a fixed string
    assert isinstance(data["reply"], str)
    assert data["reply"].strip() != ""
