import base64
import json
import logging
import zlib

import httpx
import pytest

from shared.clients.hr.kozi.HRClientKozi import HRClientKozi
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import ColorLogger

BASE_URL = "https://hr.test"


def make_jwt(exp: float | None) -> str:
    """Unsigned JWT carrying only an ``exp`` claim."""

    def _segment(obj: dict) -> str:
        return base64.urlsafe_b64encode(json.dumps(obj).encode()).decode().rstrip("=")

    claims = {} if exp is None else {"exp": exp}
    return f"{_segment({'alg': 'none'})}.{_segment(claims)}.sig"


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeEmbedClient:
    """Bag of words vectors: identical texts embed identically, disjoint texts are orthogonal."""

    dims = 256

    def __init__(self):
        self.calls = 0
        self.fail = False

    async def do_embed(self, texts):
        self.calls += 1
        if self.fail:
            raise httpx.ConnectError("embedding backend down")
        if isinstance(texts, str):
            texts = [texts]
        vectors = []
        for text in texts:
            vec = [0.0] * self.dims
            for word in text.lower().split():
                vec[zlib.crc32(word.encode()) % self.dims] += 1.0
            vectors.append(vec)
        return vectors


class FakeLLMClient:
    def __init__(self, reply: str = "Here is the answer."):
        self.reply = reply
        self.fail = False
        self.messages: list[list[dict]] = []

    async def do_chat(self, messages):
        self.messages.append(messages)
        if self.fail:
            raise httpx.ReadTimeout("llm timed out")
        return self.reply


@pytest.fixture
def logger() -> ColorLogger:
    return ColorLogger(logging.getLogger("hr_admin_bridge.tests"))


@pytest.fixture
def helper_config(monkeypatch, tmp_path, logger) -> HelperConfig:
    monkeypatch.setenv("ROOT_DIR", str(tmp_path))
    monkeypatch.setenv("HR_ENGINE", "Kozi")
    monkeypatch.setenv("HR_KOZI_BASE_URL", BASE_URL)
    monkeypatch.setenv("HR_KOZI_EMAIL", "admin@kozi.test")
    monkeypatch.setenv("HR_KOZI_PASSWORD", "secret")
    monkeypatch.setenv("HR_CACHE_TTL", "300")
    monkeypatch.setenv("MAIL_ENGINE", "Console")
    monkeypatch.setenv("APP_API_KEY", "test-key")
    monkeypatch.setenv("VECTOR_STORE_PATH", str(tmp_path / "vectors"))
    monkeypatch.setenv("KNOWLEDGE_DOCS_PATH", str(tmp_path / "docs"))
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'admin.db'}")
    return HelperConfig(logger=logger, load_env_file=False)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_hr_client(helper_config, clock):
    """Factory for a booted Kozi client whose HTTP traffic goes to ``handler``. Call inside a running loop."""

    async def _make(handler) -> HRClientKozi:
        client = HRClientKozi(helper_config=helper_config, clock=clock)
        client.set_transport(httpx.MockTransport(handler))
        await client.boot()
        return client

    return _make
