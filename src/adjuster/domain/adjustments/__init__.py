"""Shadow adjustment subsystem."""

from __future__ import annotations

from .codec import ChangeMap, ChangesFormat, JsonValue, decode_changes, encode_changes
from .engine import AdjustmentEngine, merge_and_filter_changes
from .errors import (
    AdjusterError,
    ModelAdjustedError,
    SubjectResolutionError,
    UnknownChangesetAttributeError,
)
from .protection import SaveProtection
from .registry import SubjectRegistry

__all__ = [
    "AdjusterError",
    "AdjustmentEngine",
    "ChangeMap",
    "ChangesFormat",
    "JsonValue",
    "ModelAdjustedError",
    "SaveProtection",
    "SubjectRegistry",
    "SubjectResolutionError",
    "UnknownChangesetAttributeError",
    "decode_changes",
    "encode_changes",
    "merge_and_filter_changes",
]
