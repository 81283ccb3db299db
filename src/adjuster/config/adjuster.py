"""Adjustment engine configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field
from importlib import import_module
from typing import Final

from adjuster.domain.adjustments.codec import ChangesFormat
from adjuster.domain.model.changeset import Changeset

from .env import env_flag, env_list, optional_env_var
from .errors import ConfigurationError

DEFAULT_TABLE_NAME: Final[str] = "adjustments"
DEFAULT_ADJUSTABLE_COLUMN: Final[str] = "adjustable"
DEFAULT_CHANGES_COLUMN: Final[str] = "changes"


@dataclass(frozen=True, slots=True)
class AdjusterConfig:
    """Process-wide settings threaded into the engine and the changeset stores.

    ``adjustable_column`` is the identity column prefix in polymorphic mode
    (``adjustable_id`` / ``adjustable_type``) and the full foreign key column
    name otherwise (for example ``fruit_id``).
    """

    changeset_model: type[Changeset] = Changeset
    table_name: str = DEFAULT_TABLE_NAME
    polymorphic: bool = True
    adjustable_column: str = DEFAULT_ADJUSTABLE_COLUMN
    changes_column: str = DEFAULT_CHANGES_COLUMN
    changes_format: ChangesFormat = ChangesFormat.MAPPING
    save_protection: bool = True
    extra_columns: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not issubclass(self.changeset_model, Changeset):
            raise ConfigurationError("changeset_model must subclass Changeset")
        reserved = {
            "id",
            "subject_id",
            "subject_type",
            "changes",
            self.changes_column,
            *self.subject_columns,
        }
        clashes = sorted(reserved.intersection(self.extra_columns))
        if clashes:
            raise ConfigurationError(f"Extra columns clash with reserved columns: {clashes}")
        core_columns = ("id", *self.subject_columns, self.changes_column)
        if len(set(core_columns)) != len(core_columns):
            raise ConfigurationError(f"Duplicate adjustment column names: {core_columns}")

    @property
    def subject_id_column(self) -> str:
        if self.polymorphic:
            return f"{self.adjustable_column}_id"
        return self.adjustable_column

    @property
    def subject_type_column(self) -> str | None:
        if self.polymorphic:
            return f"{self.adjustable_column}_type"
        return None

    @property
    def subject_columns(self) -> tuple[str, ...]:
        type_column = self.subject_type_column
        if type_column is None:
            return (self.subject_id_column,)
        return (self.subject_id_column, type_column)


def load_changeset_model(path: str) -> type[Changeset]:
    """Import a changeset model from a ``package.module:ClassName`` path."""

    module_name, sep, attribute = path.partition(":")
    if not sep or not module_name or not attribute:
        raise ConfigurationError(f"Invalid changeset model path: {path!r}")
    try:
        module = import_module(module_name)
    except ImportError as exc:
        raise ConfigurationError(f"Cannot import changeset model module {module_name!r}") from exc
    model = getattr(module, attribute, None)
    if not isinstance(model, type) or not issubclass(model, Changeset):
        raise ConfigurationError(f"{path!r} is not a Changeset subclass")
    return model


def get_adjuster_config() -> AdjusterConfig:
    model_path = optional_env_var("ADJUSTER_CHANGESET_MODEL", "")
    format_name = optional_env_var("ADJUSTER_CHANGES_FORMAT", ChangesFormat.MAPPING.value)
    try:
        changes_format = ChangesFormat(format_name.lower())
    except ValueError as exc:
        raise ConfigurationError(f"Unknown changes format: {format_name!r}") from exc

    return AdjusterConfig(
        changeset_model=load_changeset_model(model_path) if model_path else Changeset,
        table_name=optional_env_var("ADJUSTER_TABLE", DEFAULT_TABLE_NAME),
        polymorphic=env_flag("ADJUSTER_POLYMORPHIC", default=True),
        adjustable_column=optional_env_var("ADJUSTER_ADJUSTABLE_COLUMN", DEFAULT_ADJUSTABLE_COLUMN),
        changes_column=optional_env_var("ADJUSTER_CHANGES_COLUMN", DEFAULT_CHANGES_COLUMN),
        changes_format=changes_format,
        save_protection=env_flag("ADJUSTER_SAVE_PROTECTION", default=True),
        extra_columns=env_list("ADJUSTER_EXTRA_COLUMNS"),
    )
