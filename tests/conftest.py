"""Shared fixtures for jetwatch tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any, Dict, Union

import httpx
import pytest
import yaml

from jetwatch.config.models import WatchConfig

SAMPLE_CONFIG: Dict[str, Any] = {
    "app": {"name": "JetAI", "version": "0.1.0"},
    "probe": {"base_url": "http://jetai.test", "timeout": 5.0},
    "services": {
        "Firebase": {"endpoint": "/api/firebase/status", "description": "Auth"},
        "Stripe": {"endpoint": "/api/stripe/status", "description": "Payments"},
        "Gemini AI": {"endpoint": "/api/gemini/status"},
    },
    "fallbacks": {
        "Firebase": {"signal": "firebase_initialized", "expect": "true", "message": "Firebase detected in local storage"},
        "Gemini AI": {"signal": "recent_ai_responses", "message": "Recent AI activity detected"},
    },
    "tabs": {
        "Profile": {
            "components": ["UserInfo", "PreferencePanel"],
            "dependencies": ["Firebase", "Stripe"],
        },
        "Chat": {
            "components": ["MessageList"],
            "dependencies": ["Gemini AI"],
        },
    },
    "chat": {"audited_tabs": ["Chat"], "enabled_tabs": ["Chat"]},
}

# A canned reply: (status code, JSON body) or an exception to raise.
Reply = Union[tuple[int, Any], Exception]


def make_transport(replies: Dict[str, Reply], default: Reply | None = None) -> httpx.MockTransport:
    """Build a transport answering status endpoints by URL path."""

    def handler(request: httpx.Request) -> httpx.Response:
        reply = replies.get(request.url.path, default)
        if reply is None:
            return httpx.Response(404, text="not found")
        if isinstance(reply, Exception):
            raise reply
        code, body = reply
        if isinstance(body, str):
            return httpx.Response(code, text=body)
        return httpx.Response(code, json=body)

    return httpx.MockTransport(handler)


@pytest.fixture()
def transport_factory() -> Callable[..., httpx.MockTransport]:
    return make_transport


@pytest.fixture()
def all_ok_transport() -> httpx.MockTransport:
    """Every status endpoint reports ok."""
    return make_transport({}, default=(200, {"status": "ok"}))


@pytest.fixture()
def sample_config() -> WatchConfig:
    """Return a parsed WatchConfig from sample data."""
    return WatchConfig(**SAMPLE_CONFIG)


@pytest.fixture()
def default_config() -> WatchConfig:
    """The built-in registries."""
    return WatchConfig()


@pytest.fixture()
def sample_config_dict() -> Dict[str, Any]:
    """Return raw sample config dict."""
    return dict(SAMPLE_CONFIG)


@pytest.fixture()
def config_file(tmp_path: Path) -> Path:
    """Write sample config to a temp .jetwatch.yaml and return the path."""
    path = tmp_path / ".jetwatch.yaml"
    with path.open("w") as fh:
        yaml.dump(SAMPLE_CONFIG, fh)
    return path
