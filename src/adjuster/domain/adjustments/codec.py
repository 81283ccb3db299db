"""JSON wire form of a changeset's ``changes`` mapping."""

from __future__ import annotations

import json
from collections.abc import Mapping
from enum import StrEnum
from typing import cast

type JsonValue = str | int | float | bool | None | list[JsonValue] | dict[str, JsonValue]
type ChangeMap = dict[str, JsonValue]


class ChangesFormat(StrEnum):
    """How a store hands changes across its boundary."""

    MAPPING = "mapping"
    TEXT = "text"


def decode_changes(value: Mapping[str, JsonValue] | str | None) -> ChangeMap:
    """Return the structured form of stored changes.

    ``None`` and blank text decode to an empty mapping. Text must hold a JSON object.
    """

    if value is None:
        return {}
    if isinstance(value, str):
        if not value.strip():
            return {}
        try:
            loaded = json.loads(value)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Malformed changes payload: {exc.msg}") from exc
        if not isinstance(loaded, dict):
            raise ValueError("Changes payload must be a JSON object")
        return cast(ChangeMap, loaded)
    return dict(value)


def encode_changes(changes: Mapping[str, JsonValue], fmt: ChangesFormat) -> ChangeMap | str:
    # raises TypeError for values without a JSON form
    text = json.dumps(dict(changes), separators=(",", ":"))
    if fmt is ChangesFormat.TEXT:
        return text
    return cast(ChangeMap, json.loads(text))
