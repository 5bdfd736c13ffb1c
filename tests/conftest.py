from __future__ import annotations

import asyncio
import io
from types import SimpleNamespace
from typing import Any, List, Optional

import pytest
from PIL import Image


def make_response(*parts: Any) -> SimpleNamespace:
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=list(parts)))])


def text_part(text: str) -> SimpleNamespace:
    return SimpleNamespace(text=text, inline_data=None)


def image_part(data: Any, mime_type: str = "image/png") -> SimpleNamespace:
    return SimpleNamespace(text=None, inline_data=SimpleNamespace(mime_type=mime_type, data=data))


class StubModel:
    def __init__(self, owner: "StubTransport", model_name: str):
        self.owner = owner
        self.model_name = model_name

    async def generate_content_async(self, parts, request_options=None):
        self.owner.calls.append({"model": self.model_name, "parts": parts, "request_options": request_options})
        if self.owner.gate is not None:
            await self.owner.gate.wait()
        if self.owner.delay:
            await asyncio.sleep(self.owner.delay)
        if self.owner.error is not None:
            raise self.owner.error
        return self.owner.response


class StubTransport:
    """Stands in for the Gemini SDK: records every call and returns a canned response."""

    def __init__(self, response: Any = None):
        self.response = response if response is not None else make_response()
        self.calls: List[dict] = []
        self.api_keys: List[str] = []
        self.error: Optional[Exception] = None
        self.delay: float = 0.0
        self.gate: Optional[asyncio.Event] = None

    def __call__(self, model_name: str, api_key: str) -> StubModel:
        self.api_keys.append(api_key)
        return StubModel(self, model_name)

    def prompt_sent(self, index: int = -1) -> str:
        return self.calls[index]["parts"][1]["text"]


@pytest.fixture
def transport() -> StubTransport:
    return StubTransport()


@pytest.fixture
def no_credentials(monkeypatch):
    for name in ("VITE_API_KEY", "API_KEY", "GEMINI_API_KEY"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def png_bytes() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), (200, 30, 30)).save(buf, format="PNG")
    return buf.getvalue()
