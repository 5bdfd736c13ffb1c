from __future__ import annotations

import asyncio
import logging
from typing import Optional

from .codec import encode_image, is_image_mime
from .errors import ClientBusyError, InvalidImageError
from .features import get_feature
from .llm.gemini import GeminiClient
from .prompts import prompt_for
from .state import ProcessRequest, ProcessResult

logger = logging.getLogger(__name__)


def validate_request(request: ProcessRequest) -> None:
    if not is_image_mime(request.mime_type):
        raise InvalidImageError("Please upload a valid image file (JPG, PNG).")
    if not request.image_bytes:
        raise InvalidImageError("The selected image is empty.")


async def run_process(request: ProcessRequest, client: Optional[GeminiClient] = None) -> ProcessResult:
    # 1) validate → 2) prompt → 3) encode → 4) generate
    validate_request(request)
    descriptor = get_feature(request.feature)
    prompt = prompt_for(descriptor, request.user_text)
    b64 = await encode_image(request.image_bytes)
    client = client or GeminiClient()
    return await client.process(b64, request.mime_type, descriptor.id, prompt)


class ProcessSession:
    """Per-view wrapper that drops results belonging to an abandoned request."""

    def __init__(self, client: Optional[GeminiClient] = None):
        self.client = client or GeminiClient()
        self._token = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def token(self) -> int:
        return self._token

    async def submit(self, request: ProcessRequest) -> Optional[ProcessResult]:
        """Run ``request``; returns ``None`` if the view moved on before it finished.

        A submit while another run is outstanding raises ``ClientBusyError`` and
        leaves the outstanding run untouched; call ``abandon()`` first to replace it.
        """
        if (self._task is not None and not self._task.done()) or self.client.busy:
            raise ClientBusyError()
        self._token += 1
        token = self._token
        task = asyncio.ensure_future(run_process(request, self.client))
        self._task = task
        try:
            result = await task
        except asyncio.CancelledError:
            if token != self._token:
                logger.info("Request %d abandoned", token)
                return None
            raise
        finally:
            if self._task is task:
                self._task = None
        if token != self._token:
            logger.info("Discarding stale result for request %d (current %d)", token, self._token)
            return None
        return result

    def abandon(self) -> None:
        self._token += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
