from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal, Optional


class FeatureType(str, Enum):
    RECOGNITION = "RECOGNITION"
    SMOOTH_SKIN = "SMOOTH_SKIN"
    FACE_SWAP = "FACE_SWAP"
    CHANGE_CLOTHES = "CHANGE_CLOTHES"
    CHANGE_BACKGROUND = "CHANGE_BACKGROUND"


@dataclass(frozen=True)
class FeatureDescriptor:
    id: FeatureType
    label: str
    icon: str
    description: str
    default_prompt: str
    requires_input: bool = False
    input_label: Optional[str] = None
    input_placeholder: Optional[str] = None

    def __post_init__(self) -> None:
        if self.requires_input != bool(self.input_label):
            raise ValueError(f"{self.id.value}: input_label must be set iff requires_input")


@dataclass(frozen=True)
class ProcessRequest:
    image_bytes: bytes
    mime_type: str
    feature: FeatureType
    user_text: str = ""


ResultKind = Literal["text", "image"]


@dataclass(frozen=True)
class ProcessResult:
    kind: ResultKind
    content: str

    def __post_init__(self) -> None:
        if self.kind not in ("text", "image"):
            raise ValueError(f"Unsupported result kind={self.kind}")
        # text results are free-form model prose; only image results are constrained
        if self.kind == "image" and not self.content.startswith("data:image/"):
            raise ValueError("image result content must be a data:image/ URI")
