# photo_tagger/inputs/inputs.py
"""
Run configuration loader for photo-tagger.

Goals
-----
- One validated `RunOptions` object passed explicitly into the engine; no
  call site reads the environment on its own.
- Sources, lowest to highest precedence: defaults → JSON config file →
  PHOTO_TAGGER_* environment variables → CLI flags (`with_overrides`).

Supported JSON shape
--------------------
    {
      "target_folder": "photos/2025-03-14",
      "gap_minutes": 10,
      "concurrency": 3,
      "activity_mode": "rules",
      "on_collision": "skip_existing",
      "categorize": false
    }

Environment overrides (optional)
--------------------------------
- PHOTO_TAGGER_FORCE_RECLASSIFY -> force_reclassify (1/true/yes/on)
- PHOTO_TAGGER_GAP_MINUTES      -> gap_minutes (float)
- PHOTO_TAGGER_CONCURRENCY      -> concurrency (int)
- PHOTO_TAGGER_PROVIDER         -> provider
- PHOTO_TAGGER_LOG_FILE         -> log_file

Public API
----------
- class InputsLoader:
    - load(path, **base) -> RunOptions
    - load_json(text) -> RunOptions
    - with_overrides(cfg, **kwargs) -> RunOptions (non-destructive copy)
- function load_inputs(path) -> RunOptions (convenience)
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, cast

from pydantic import BaseModel, Field, ValidationError

from photo_tagger.core.classify.activity import ActivityMode
from photo_tagger.core.classify.categories import DEFAULT_MIN_CONFIDENCE
from photo_tagger.core.classify.continuity import DEFAULT_GAP_MINUTES
from photo_tagger.core.fs.folders import CollisionPolicy

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


class RunOptions(BaseModel):
    """Everything one run (grouping or category pass) needs to know."""

    target_folder: str = Field(..., description="Folder holding the photos (not recursive).")
    dry_run: bool = Field(False, description="Report only: no photos are moved into group or category folders.")
    force_reclassify: bool = Field(False, description="Ignore earlier output and stored records; analyze everything again.")
    gap_minutes: float = Field(DEFAULT_GAP_MINUTES, gt=0, description="Continuity / clustering threshold in minutes.")
    on_collision: CollisionPolicy = Field("skip_existing", description="What to do when a group folder already holds the photo.")
    concurrency: int = Field(1, ge=1, le=32, description="Parallel analyzer calls.")
    activity_mode: ActivityMode = Field("rules", description='"rules" (rule table) or "keywords" (top-2 keywords).')
    block_names: bool = Field(False, description="Label text-less segments by timestamp instead of 'unclassified'.")
    provider: Literal["openai", "mock"] = Field("openai", description="Analyzer backend.")
    organize: bool = Field(False, description="Move grouped photos into per-group folders.")
    categorize: bool = Field(False, description="Tag photos against the category subfolders instead of grouping them.")
    min_confidence: float = Field(DEFAULT_MIN_CONFIDENCE, ge=0.0, le=1.0, description="Lowest category match score that tags a photo.")
    log_file: str | None = Field(None, description="Optional rotating log file.")
    debug: bool = Field(False, description="Verbose console logging.")


@dataclass(frozen=True)
class InputsLoader:
    """
    File-first options loader with light env overrides.

    Responsibilities:
        - Read JSON from a file or string (optional)
        - Validate with Pydantic
        - Apply environment overrides once, at load time
    """

    env_prefix: str = "PHOTO_TAGGER_"

    # ---------- Public API ----------

    def load(self, path: str | Path | None = None, **base: Any) -> RunOptions:
        """
        Build RunOptions from an optional JSON file merged over `base` values.

        Args:
            path: JSON config file, or None for no file.
            base: Values known up front (e.g. target_folder from the CLI).
        """
        data: dict[str, Any] = {k: v for k, v in base.items() if v is not None}
        if path is not None:
            data.update(self._read_json_file(self._resolve_path(path)))
        data.update(self._env_overrides())
        return self._parse_root(data)

    def load_json(self, text: str) -> RunOptions:
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON payload: {e}") from e
        if not isinstance(raw, dict):
            raise ValueError("Config JSON must be an object.")
        raw.update(self._env_overrides())
        return self._parse_root(raw)

    def with_overrides(self, cfg: RunOptions, **overrides: Any) -> RunOptions:
        """
        Return a *new* RunOptions with the non-null overrides applied (validated).
        Does not mutate the original instance.
        """
        updates = {k: v for k, v in overrides.items() if v is not None}
        if not updates:
            return cfg
        return self._parse_root({**cfg.model_dump(), **updates})

    # ---------- Internals ----------

    def _resolve_path(self, path: str | Path) -> Path:
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(f"Config file not found: {p}")
        return p

    def _read_json_file(self, p: Path) -> dict[str, Any]:
        if p.suffix.lower() != ".json":
            raise ValueError(f"Unsupported config format for {p.name}; only .json is supported.")
        try:
            raw = json.loads(p.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {p}: {e}") from e
        if not isinstance(raw, dict):
            raise ValueError(f"Config in {p} must be a JSON object.")
        return cast(dict[str, Any], raw)

    def _parse_root(self, data: dict[str, Any]) -> RunOptions:
        try:
            return RunOptions.model_validate(data)
        except ValidationError as e:
            raise ValueError(f"Config validation failed:\n{e}") from e

    def _env_overrides(self) -> dict[str, Any]:
        prefix = self.env_prefix
        updates: dict[str, Any] = {}

        force = os.getenv(f"{prefix}FORCE_RECLASSIFY")
        if force:
            flag = force.strip().lower()
            if flag in _TRUTHY:
                updates["force_reclassify"] = True
            elif flag in _FALSY:
                updates["force_reclassify"] = False

        gap = os.getenv(f"{prefix}GAP_MINUTES")
        if gap:
            try:
                updates["gap_minutes"] = float(gap)
            except ValueError:
                # Ignore bad value; keep file/default
                pass

        conc = os.getenv(f"{prefix}CONCURRENCY")
        if conc:
            try:
                updates["concurrency"] = int(conc)
            except ValueError:
                pass

        provider = os.getenv(f"{prefix}PROVIDER")
        if provider and provider.strip().lower() in ("openai", "mock"):
            updates["provider"] = provider.strip().lower()

        log_file = os.getenv(f"{prefix}LOG_FILE")
        if log_file:
            updates["log_file"] = log_file

        return updates


# ----------------------------
# Convenience function
# ----------------------------


def load_inputs(path: str | Path | None = None, **base: Any) -> RunOptions:
    """Convenience wrapper for one-shot callers."""
    return InputsLoader().load(path, **base)
