# photo_tagger/tools/vision/openai_provider.py
"""
OpenAI Vision Provider (V1)

Purpose
-------
Production `VisionProvider` using OpenAI multimodal models. Returns the
model's raw text; JSON extraction and defaults are the normalizer's job.

Behavior
--------
- Images are downscaled with Pillow (longest side ≤ MAX_SIDE) and re-encoded
  as JPEG before upload. Files Pillow cannot open are sent as-is.
- One attempt per photo. A failure surfaces as an exception; the engine
  records it on the photo and moves on.

Environment
-----------
OPENAI_API_KEY                : required
PHOTO_TAGGER_VISION_MODEL     : default "gpt-4o-mini"
PHOTO_TAGGER_VISION_TIMEOUT_S : default "60"
"""

from __future__ import annotations

import base64
import io
import json
import mimetypes
import os
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from .prompts import material_prompt
from .provider_base import VisionProvider

MAX_SIDE = 1568


class OpenAIProvider(VisionProvider):
    def __init__(self, *, model: str | None = None, timeout_s: float | None = None) -> None:
        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise RuntimeError("OPENAI_API_KEY not set for OpenAIProvider.")
        try:
            from openai import OpenAI
        except ImportError as e:
            raise RuntimeError("OpenAI SDK not available. Install `openai>=1.0`.") from e

        self._model = model or os.getenv("PHOTO_TAGGER_VISION_MODEL", "gpt-4o-mini")
        self._timeout_s = timeout_s if timeout_s is not None else float(os.getenv("PHOTO_TAGGER_VISION_TIMEOUT_S", "60"))
        self._client = OpenAI(api_key=api_key, timeout=self._timeout_s, max_retries=0)

    def analyze(self, path: str) -> str:
        p = Path(path)
        if not p.is_file():
            raise FileNotFoundError(f"Image not found: {path}")
        data_url = _data_url(p)
        prompt = material_prompt(p.name)

        if hasattr(self._client, "responses"):
            return self._call_responses_api(data_url, prompt)
        return self._call_chat_completions(data_url, prompt)

    # ---------- OpenAI calls ----------
    def _call_responses_api(self, data_url: str, prompt: str) -> str:
        out = self._client.responses.create(
            model=self._model,
            input=[
                {
                    "role": "user",
                    "content": [
                        {"type": "input_text", "text": prompt},
                        {"type": "input_image", "image_url": data_url},
                    ],
                }
            ],
        )
        txt = getattr(out, "output_text", None)
        if isinstance(txt, str) and txt.strip():
            return txt
        return json.dumps(getattr(out, "output", ""), default=str)

    def _call_chat_completions(self, data_url: str, prompt: str) -> str:
        resp = self._client.chat.completions.create(
            model=self._model,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {"type": "image_url", "image_url": {"url": data_url}},
                    ],
                }
            ],
        )
        return resp.choices[0].message.content or ""


# ---------- helpers ----------
def _data_url(p: Path) -> str:
    try:
        with Image.open(p) as img:
            img = img.convert("RGB")
            img.thumbnail((MAX_SIDE, MAX_SIDE))
            buf = io.BytesIO()
            img.save(buf, format="JPEG", quality=85)
        return "data:image/jpeg;base64," + base64.b64encode(buf.getvalue()).decode("ascii")
    except (UnidentifiedImageError, OSError, ValueError):
        mime = mimetypes.guess_type(p.name)[0] or "application/octet-stream"
        return f"data:{mime};base64," + base64.b64encode(p.read_bytes()).decode("ascii")
