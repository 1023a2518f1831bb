# photo_tagger/tools/__init__.py
"""
photo-tagger: tools package

Exports only modules that live under `photo_tagger/tools`:
  - vision (subpackage)        (analyzer backends + batch runner)

Anything outside `photo_tagger/tools` (e.g., the record store) should be
imported directly from its own package, not re-exported here.
"""

from __future__ import annotations

from . import vision

__all__ = ["vision"]
