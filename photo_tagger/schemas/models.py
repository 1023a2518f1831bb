# photo_tagger/schemas/models.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TypedDict

from pydantic import BaseModel, ConfigDict, Field

# =========================
# Analyzer-side shapes
# =========================


class DetectedObject(TypedDict, total=False):
    """
    Typical object descriptor returned by the analyzer.

    Stored verbatim inside PhotoRecord.objects: the bbox is not clamped to
    [0, 1] and area_ratio is not cross-checked against it.
    """

    label: str
    bbox: list[float]
    area_ratio: float


# =========================
# Durable per-photo record
# =========================


class PhotoRecord(BaseModel):
    """One analyzed photo, as appended to the record log."""

    model_config = ConfigDict(extra="ignore")

    file: str = Field(..., description="Photo filename; primary key within a folder.")
    objects: list[Any] = Field(default_factory=list, description="Detected objects, stored exactly as received.")
    board_text: str = Field("", description="Text read from the site blackboard, if any.")
    other_text: str = Field("", description="Other visible text (signs, nameplates, numbers).")
    notes: str = Field("", description="Factual remarks from the analyzer.")
    error: str | None = Field(None, description="Present only when analysis failed or the payload was malformed.")

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_log_dict(self) -> dict[str, Any]:
        """Fixed key order; `error` omitted when absent."""
        out: dict[str, Any] = {
            "file": self.file,
            "objects": self.objects,
            "board_text": self.board_text,
            "other_text": self.other_text,
            "notes": self.notes,
        }
        if self.error is not None:
            out["error"] = self.error
        return out


# =========================
# Derived / output entities
# =========================


@dataclass(frozen=True)
class ActivityFrame:
    """Transient (activity, timestamp) pair fed to the continuity resolver. Empty activity = no usable text."""

    activity: str
    timestamp: int


class GroupRecord(BaseModel):
    """Per-photo value in the folder's photo-groups.json."""

    role: str = Field("", description="Photo role, e.g. 機械全景 or 特定自主検査証票.")
    machine_type: str = Field("", description="Machine / activity label.")
    machine_id: str = Field("", description="Model number read from plates or boards.")
    group: int = Field(0, ge=0, description="Time-cluster index within the machine identity; 0 = unclustered.")
    has_board: bool = Field(False, description="True when blackboard text was read.")
    detected_text: str = Field("", description="Board and other text combined.")
    description: str = Field("", description="Short factual description.")


class Group(BaseModel):
    """A time cluster of photos sharing one (machine_type, machine_id)."""

    machine_type: str
    machine_id: str
    group_index: int = Field(..., ge=1)
    member_files: list[str] = Field(default_factory=list)
    time_range: tuple[int, int] = Field(..., description="(first, last) member timestamps, epoch seconds.")

    @property
    def key(self) -> tuple[str, str]:
        return (self.machine_type, self.machine_id)


class TagRecord(BaseModel):
    """Per-photo value in the folder's photo-tags.json (category mode)."""

    tag: str = Field(..., description="Category folder the photo belongs to.")
    confidence: float = Field(0.0, ge=0.0, le=1.0, description="Match score between the photo text and the category name.")


# =========================
# Run reports
# =========================


class PassReport(BaseModel):
    """Counters shared by every pass over a photo folder."""

    folder: str
    total_images: int = 0
    skipped: int = Field(0, description="Already present in the folder's output file.")
    reused: int = Field(0, description="Pending, but a usable record was already in the log.")
    analyzed: int = Field(0, description="Sent to the analyzer this run.")
    errors: list[str] = Field(default_factory=list, description="Filenames whose record carries an error.")
    stopped: bool = False
    elapsed_s: float = 0.0


class RunReport(PassReport):
    """Outcome of one grouping pass over a folder."""

    untimed: list[str] = Field(default_factory=list, description="Filenames without a parseable timestamp.")
    usable: int = Field(0, description="Photos with a usable record after the run.")
    groups: list[Group] = Field(default_factory=list)
    records: dict[str, GroupRecord] = Field(default_factory=dict)

    @property
    def exit_code(self) -> int:
        return 0 if self.usable > 0 else 1


class CategorizeReport(PassReport):
    """Outcome of one category pass over a folder."""

    categories: list[str] = Field(default_factory=list, description="Category subfolders found in the folder.")
    tags: dict[str, TagRecord] = Field(default_factory=dict, description="Every tagged photo, earlier runs included.")
    unmatched: list[str] = Field(default_factory=list, description="Usable records that matched no category.")
    moved: int = 0

    @property
    def exit_code(self) -> int:
        return 0 if self.tags else 1
