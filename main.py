# main.py
"""
Entry Point: photo-tagger

Purpose
-------
Group a folder of construction-site photos by machine and activity:
  1) Analyze new photos with the vision/OCR backend (records go to an
     append-only log in the folder).
  2) Resolve activity labels (rule table or keywords + time continuity).
  3) Assign stable group numbers per machine and write photo-groups.json.

With --categorize, photos are instead sorted into the category subfolders that
already exist in the folder (photo-tags.json records the tags).

Usage
-----
    python main.py photos/2025-03-14
    python main.py photos/2025-03-14 --concurrency 3 --gap-minutes 15 --profile
    python main.py photos/2025-03-14 --provider mock --organize --dry-run
    python main.py photos/2025-03-14 --categorize --min-confidence 0.6
"""

from __future__ import annotations

from photo_tagger.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
