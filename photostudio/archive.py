from __future__ import annotations

import time
from pathlib import Path
from typing import Optional, Union

from .codec import decode_data_uri
from .state import ProcessResult


def result_filename(result: ProcessResult, timestamp_ms: Optional[int] = None) -> str:
    ts = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
    ext = ".png" if result.kind == "image" else ".md"
    return f"ai-result-{ts}{ext}"


def save_result(result: ProcessResult, outdir: Union[str, Path], timestamp_ms: Optional[int] = None) -> Path:
    out = Path(outdir)
    out.mkdir(parents=True, exist_ok=True)
    path = out / result_filename(result, timestamp_ms)
    if result.kind == "image":
        _, data = decode_data_uri(result.content)
        path.write_bytes(data)
    else:
        path.write_text(result.content, encoding="utf-8")
    return path
