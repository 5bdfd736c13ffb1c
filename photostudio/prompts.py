from __future__ import annotations

from typing import Callable, Dict

from .state import FeatureDescriptor, FeatureType


RECOGNITION_FALLBACK_PROMPT = (
    "Describe the content of this image in detail, including objects, people's features, environment and style."
)

RECOGNITION_EMPTY_RESULT = "Unable to recognize content."


def _face_swap(text: str) -> str:
    return f"Replace the face of the person with: {text}. Keep pose and lighting consistent."


def _change_clothes(text: str) -> str:
    return f"Change the person's clothing to: {text}. Keep body shape and pose."


def _change_background(text: str) -> str:
    return f"Change the background to: {text}. Keep the foreground subject isolated and unchanged."


# Each template names the aspect to change and what must be preserved.
PROMPT_TEMPLATES: Dict[FeatureType, Callable[[str], str]] = {
    FeatureType.FACE_SWAP: _face_swap,
    FeatureType.CHANGE_CLOTHES: _change_clothes,
    FeatureType.CHANGE_BACKGROUND: _change_background,
}


def build_prompt(feature: FeatureType, default_prompt: str, requires_input: bool, user_text: object = "") -> str:
    """Compose the instruction sent to the model for one feature.

    Falls back to ``default_prompt`` whenever free text is not accepted, is blank,
    or is not a string. Never raises.
    """
    if not requires_input or not isinstance(user_text, str):
        return default_prompt
    if not user_text.strip():
        return default_prompt
    template = PROMPT_TEMPLATES.get(feature)
    if template is None:
        return default_prompt
    return template(user_text)


def prompt_for(descriptor: FeatureDescriptor, user_text: object = "") -> str:
    return build_prompt(descriptor.id, descriptor.default_prompt, descriptor.requires_input, user_text)


def build_image_edit_prompt(prompt_text: str) -> str:
    # Envelope applied to every image-editing request
    instruction = prompt_text.rstrip().rstrip(".")
    return (
        f"Perform the following edit on the provided image: {instruction}. "
        "Ensure high quality, photorealistic results. Maintain the original aspect ratio."
    )
