from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import gradio as gr

from photostudio.archive import save_result
from photostudio.codec import guess_mime_type, read_image
from photostudio.errors import CredentialError, PhotoStudioError
from photostudio.features import FEATURE_CONFIGS, feature_labels, get_feature
from photostudio.logging_config import configure_logging
from photostudio.pipeline import ProcessSession
from photostudio.state import ProcessRequest

OUTPUT_DIR = Path(os.getenv("PHOTOSTUDIO_OUTPUT_DIR", str(Path(tempfile.gettempdir()) / "photostudio")))

# One session for the whole app: only safe because the process button is wired with concurrency_limit=1
_session = ProcessSession()

# (result image, result text, download file, error banner)
Outputs = Tuple[Optional[str], str, Optional[str], str]


def render_error(err: Exception) -> str:
    if isinstance(err, CredentialError):
        return (
            "### ⚙️ Configuration missing\n"
            f"{err}\n\n"
            "- **Hosted deployment:** add an `API_KEY` environment variable in the project settings and redeploy.\n"
            "- **Local run:** create a `.env` file in the project root containing `VITE_API_KEY=<your key>`."
        )
    return f"### ⚠️ Processing failed\n{err}"


def on_feature_change(label: str) -> Dict[str, Any]:
    f = get_feature(label)
    placeholder = f.input_placeholder or "Describe what you want here..."
    return gr.update(visible=f.requires_input, label=f.input_label or "", placeholder=placeholder, value="")


async def process_image(image_path: Optional[str], feature_label: Optional[str], user_text: str) -> Outputs:
    if not image_path:
        return None, "", None, render_error(PhotoStudioError("Please upload an image first."))
    if not feature_label:
        return None, "", None, render_error(PhotoStudioError("Please choose a feature."))

    try:
        data = await read_image(image_path)
        request = ProcessRequest(
            image_bytes=data,
            mime_type=guess_mime_type(data, image_path) or "",
            feature=get_feature(feature_label).id,
            user_text=user_text or "",
        )
        result = await _session.submit(request)
    except PhotoStudioError as e:
        return None, "", None, render_error(e)

    if result is None:
        # superseded by a newer request
        return None, "", None, ""
    if result.kind == "text":
        return None, result.content, None, ""
    saved = str(save_result(result, OUTPUT_DIR))
    return saved, "", saved, ""


def app() -> gr.Blocks:
    configure_logging()
    first = FEATURE_CONFIGS[0]
    with gr.Blocks(title="AI Photo Studio (Gemini 2.5)") as demo:
        gr.Markdown("""
        # AI Photo Studio
        Upload a photo, pick a one-click edit, optionally describe what you want, and let Gemini do the rest.
        Requires `VITE_API_KEY` (local `.env`) or `API_KEY` (hosted) to be set.
        """)

        with gr.Row():
            with gr.Column():
                source = gr.Image(label="Source image (JPG, PNG)", type="filepath")
                feature = gr.Radio(
                    choices=feature_labels(),
                    value=first.label,
                    label="Choose a feature",
                    info=" · ".join(f"{f.label}: {f.description}" for f in FEATURE_CONFIGS),
                )
                guidance = gr.Textbox(label=first.input_label or "", lines=2, visible=first.requires_input)
                run_btn = gr.Button("Start processing", variant="primary")
                error = gr.Markdown()
            with gr.Column():
                result_img = gr.Image(label="Result", type="filepath", interactive=False)
                result_text = gr.Markdown()
                download = gr.File(label="Download", interactive=False)

        feature.change(on_feature_change, inputs=[feature], outputs=[guidance])
        # concurrency_limit=1 serializes clicks from every browser onto the shared _session;
        # raising it would make concurrent users hit ClientBusyError
        run_btn.click(
            process_image,
            inputs=[source, feature, guidance],
            outputs=[result_img, result_text, download, error],
            concurrency_limit=1,
        )

    return demo


if __name__ == "__main__":
    port = int(os.getenv("PORT", "7860"))
    app().launch(server_name="0.0.0.0", server_port=port)
