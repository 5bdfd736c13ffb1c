from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import List, Optional

from .archive import save_result
from .codec import guess_mime_type
from .errors import CredentialError, PhotoStudioError
from .features import FEATURE_CONFIGS, get_feature
from .logging_config import configure_logging
from .pipeline import run_process
from .state import ProcessRequest


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="AI Photo Studio: one-click Gemini photo edits")
    parser.add_argument("--image", type=str, default="", help="Path to the source image")
    parser.add_argument("--feature", type=str, default="", help="Feature id (e.g. CHANGE_BACKGROUND) or label")
    parser.add_argument("--text", type=str, default="", help="Optional guidance for features that accept it")
    parser.add_argument("--outdir", type=str, default="", help="Where to save the result (optional)")
    parser.add_argument("--list-features", action="store_true", help="Print the available features and exit")
    parser.add_argument("--log-level", type=str, default=None, help="Logging level (default from PHOTOSTUDIO_LOG_LEVEL)")
    args = parser.parse_args(argv)

    configure_logging(args.log_level)

    if args.list_features:
        for f in FEATURE_CONFIGS:
            suffix = " [accepts --text]" if f.requires_input else ""
            print(f"{f.id.value:<18} {f.label}: {f.description}{suffix}")
        return

    if not args.image or not args.feature:
        raise SystemExit("--image and --feature are required")
    image_path = Path(args.image)
    if not image_path.exists():
        raise SystemExit(f"Image file not found: {image_path}")
    try:
        descriptor = get_feature(args.feature)
    except KeyError as e:
        raise SystemExit(str(e.args[0])) from None

    data = image_path.read_bytes()
    request = ProcessRequest(
        image_bytes=data,
        mime_type=guess_mime_type(data, image_path.name) or "application/octet-stream",
        feature=descriptor.id,
        user_text=args.text,
    )

    try:
        result = asyncio.run(run_process(request))
    except CredentialError as e:
        raise SystemExit(f"Configuration missing: {e}") from None
    except PhotoStudioError as e:
        raise SystemExit(f"Processing failed: {e}") from None

    if result.kind == "text":
        print(result.content)
    if args.outdir or result.kind == "image":
        saved = save_result(result, args.outdir or ".")
        print(f"Result saved to: {saved}")


if __name__ == "__main__":
    main()
