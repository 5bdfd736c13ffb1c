from __future__ import annotations

from typing import Dict, List

from .state import FeatureDescriptor, FeatureType


# Display order matters: the UI lays these out first-to-last.
FEATURE_CONFIGS: List[FeatureDescriptor] = [
    FeatureDescriptor(
        id=FeatureType.RECOGNITION,
        label="Recognize",
        icon="scan",
        description="Analyze the scene, objects and people in the picture",
        default_prompt=(
            "Analyze this image in detail. List the main objects in the frame, the mood of any people, "
            "the environment and background, and the artistic style."
        ),
    ),
    FeatureDescriptor(
        id=FeatureType.SMOOTH_SKIN,
        label="Smooth Skin",
        icon="sparkles",
        description="Portrait retouching: smooth skin, remove blemishes, keep texture",
        default_prompt=(
            "Retouch the person in the image. Smooth the skin, remove blemishes and acne, improve skin tone "
            "uniformity while keeping skin texture natural. Apply professional studio lighting enhancement. "
            "High quality, photorealistic."
        ),
    ),
    FeatureDescriptor(
        id=FeatureType.FACE_SWAP,
        label="Face Swap",
        icon="refresh",
        description="Replace the person's face with the features you describe",
        default_prompt="Replace the face of the person in the image with a face of a supermodel with a friendly smile.",
        requires_input=True,
        input_label="What kind of face should it become? (e.g. a movie star, wearing glasses)",
    ),
    FeatureDescriptor(
        id=FeatureType.CHANGE_CLOTHES,
        label="Change Clothes",
        icon="shirt",
        description="Swap the outfit while keeping it fitted to the body",
        default_prompt=(
            "Change the person's clothing to a formal business suit, dark blue color, clean and professional look. "
            "Keep the pose and body shape exactly the same."
        ),
        requires_input=True,
        input_label="What should they wear? (e.g. a white dress, a black suit)",
        input_placeholder="e.g. a black evening gown",
    ),
    FeatureDescriptor(
        id=FeatureType.CHANGE_BACKGROUND,
        label="Change Background",
        icon="image",
        description="Cut out the subject and replace the surroundings",
        default_prompt=(
            "Change the background to a futuristic cyberpunk city street with neon lights at night. "
            "Keep the foreground subject exactly as is with correct lighting integration."
        ),
        requires_input=True,
        input_label="What background do you want? (e.g. a sandy beach, plain white)",
    ),
]

_BY_ID: Dict[FeatureType, FeatureDescriptor] = {f.id: f for f in FEATURE_CONFIGS}
_BY_LABEL: Dict[str, FeatureDescriptor] = {f.label: f for f in FEATURE_CONFIGS}


def get_feature(feature: FeatureType | str) -> FeatureDescriptor:
    """Look up a descriptor by enum, enum value (``"FACE_SWAP"``) or display label."""
    if isinstance(feature, FeatureType):
        return _BY_ID[feature]
    key = str(feature).strip()
    if key in _BY_LABEL:
        return _BY_LABEL[key]
    try:
        return _BY_ID[FeatureType(key.upper())]
    except ValueError:
        raise KeyError(f"Unknown feature: {feature}") from None


def feature_labels() -> List[str]:
    return [f.label for f in FEATURE_CONFIGS]
