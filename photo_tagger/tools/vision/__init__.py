# photo_tagger/tools/vision/__init__.py
"""
Vision tools package

Re-exports the analyzer interface and implementations, so callers can do:

    from photo_tagger.tools.vision import (
        VisionProvider,
        MockVisionProvider,
        OpenAIProvider,
        run_batch,
        build_provider,
    )
"""

from __future__ import annotations

from typing import Literal

from .mock_provider import MockVisionProvider
from .openai_provider import OpenAIProvider
from .prompts import material_prompt
from .provider_base import VisionProvider, run_batch

ProviderName = Literal["openai", "mock"]


def build_provider(name: ProviderName) -> VisionProvider:
    if name == "mock":
        return MockVisionProvider()
    if name == "openai":
        return OpenAIProvider()
    raise ValueError(f"unknown provider: {name!r}")


__all__ = [
    "VisionProvider",
    "MockVisionProvider",
    "OpenAIProvider",
    "ProviderName",
    "build_provider",
    "material_prompt",
    "run_batch",
]
