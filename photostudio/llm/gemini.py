from __future__ import annotations

import asyncio
import base64
import logging
from typing import Any, Callable, Dict, List, Optional

from .. import config
from ..errors import (
    FRIENDLY_MESSAGE,
    ClientBusyError,
    CredentialError,
    GenerationMismatchError,
    MissingCredentialError,
    NoOutputError,
    PhotoStudioError,
    TransportError,
)
from ..prompts import RECOGNITION_EMPTY_RESULT, RECOGNITION_FALLBACK_PROMPT, build_image_edit_prompt
from ..state import FeatureType, ProcessResult

logger = logging.getLogger(__name__)

ModelFactory = Callable[[str, str], Any]


def _genai_model(model_name: str, api_key: str) -> Any:
    import google.generativeai as genai

    genai.configure(api_key=api_key)
    return genai.GenerativeModel(model_name=model_name)


class GeminiClient:
    """Send one image plus prompt to Gemini and normalize the reply into a ``ProcessResult``.

    Recognition goes to the text model and yields a text result; every other
    feature goes to the image model and yields a ``data:image/png;base64,`` URI.
    At most one call may be outstanding per client.
    """

    def __init__(
        self,
        model_factory: Optional[ModelFactory] = None,
        credential_lookup: Optional[Callable[[], Optional[str]]] = None,
        timeout: Optional[float] = None,
    ):
        self._model_factory = model_factory or _genai_model
        self._credential_lookup = credential_lookup or config.get_credential
        self.timeout = timeout if timeout is not None else config.request_timeout()
        self._in_flight = False

    @property
    def busy(self) -> bool:
        return self._in_flight

    async def process(self, base64_image: str, mime_type: str, feature: FeatureType, prompt_text: str) -> ProcessResult:
        if self._in_flight:
            raise ClientBusyError()
        self._in_flight = True
        try:
            return await self._process(base64_image, mime_type, FeatureType(feature), prompt_text)
        except PhotoStudioError as e:
            logger.error("Gemini request failed (%s): %s", type(e).__name__, e)
            raise
        except asyncio.TimeoutError as e:
            logger.error("Gemini request timed out after %.0fs", self.timeout)
            raise TransportError(
                f"The AI service did not respond within {self.timeout:.0f} seconds. Please try again."
            ) from e
        except Exception as e:
            logger.exception("Gemini API error")
            message = str(e).strip()
            # keep the vendor's wording for key problems so the setup hint still applies
            if "api key" in message.lower():
                raise CredentialError(message) from e
            raise TransportError(message or FRIENDLY_MESSAGE) from e
        finally:
            self._in_flight = False

    async def _process(self, base64_image: str, mime_type: str, feature: FeatureType, prompt_text: str) -> ProcessResult:
        api_key = self._credential_lookup()
        if not api_key:
            raise MissingCredentialError(config.CREDENTIAL_HELP)

        image_part = _image_part(base64_image, mime_type)

        if feature == FeatureType.RECOGNITION:
            model = self._model_factory(config.text_model_name(), api_key)
            logger.info("Recognition request model=%s mime=%s", config.text_model_name(), mime_type)
            resp = await self._generate(model, [image_part, {"text": prompt_text or RECOGNITION_FALLBACK_PROMPT}])
            text = _first_text(resp)
            return ProcessResult("text", text or RECOGNITION_EMPTY_RESULT)

        model = self._model_factory(config.image_edit_model_name(), api_key)
        logger.info("Image edit request feature=%s model=%s mime=%s", feature.value, config.image_edit_model_name(), mime_type)
        resp = await self._generate(model, [image_part, {"text": build_image_edit_prompt(prompt_text)}])

        data = _first_image_data(resp)
        if data:
            return ProcessResult("image", f"data:image/png;base64,{data}")
        text = _first_text(resp)
        if text:
            raise GenerationMismatchError(text)
        raise NoOutputError()

    async def _generate(self, model: Any, parts: List[Dict[str, Any]]) -> Any:
        call = model.generate_content_async(parts, request_options={"timeout": self.timeout})
        return await asyncio.wait_for(call, timeout=self.timeout)


def _image_part(base64_image: str, mime_type: str) -> Dict[str, Any]:
    # google-generativeai accepts dict with mime_type and data bytes for images
    return {"mime_type": mime_type, "data": base64.b64decode(base64_image)}


def _parts(resp: Any) -> List[Any]:
    cands = getattr(resp, "candidates", None) or []
    if not cands:
        return []
    content = getattr(cands[0], "content", None)
    return list(getattr(content, "parts", None) or [])


def _first_text(resp: Any) -> str:
    texts = [part.text for part in _parts(resp) if getattr(part, "text", None)]
    if texts:
        return "".join(texts).strip()
    # Some SDK versions only expose the flattened .text accessor, which raises when no text part exists
    try:
        return (getattr(resp, "text", "") or "").strip()
    except ValueError:
        return ""


def _first_image_data(resp: Any) -> Optional[str]:
    """Return the base64 payload of the first part carrying inline data."""
    for part in _parts(resp):
        inline = getattr(part, "inline_data", None)
        data = getattr(inline, "data", None) if inline else None
        if not data:
            continue
        if isinstance(data, (bytes, bytearray)):
            return base64.b64encode(bytes(data)).decode("ascii")
        return str(data)
    return None
