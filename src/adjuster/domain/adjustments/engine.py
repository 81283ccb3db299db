"""Stage, merge and apply shadow adjustments for a subject."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from adjuster.domain.adjustments.codec import decode_changes, encode_changes
from adjuster.domain.adjustments.protection import SaveProtection

if TYPE_CHECKING:
    from collections.abc import Mapping

    from adjuster.config.adjuster import AdjusterConfig
    from adjuster.domain.adjustments.codec import ChangeMap, JsonValue
    from adjuster.domain.model import Adjustable, Changeset
    from adjuster.domain.ports.persistence import ChangesetStore

log = logging.getLogger(__name__)


def merge_and_filter_changes(
    subject: Adjustable,
    existing: Mapping[str, JsonValue],
    proposed: Mapping[str, JsonValue],
) -> ChangeMap:
    """Merge ``proposed`` over ``existing`` and prune entries with no effect.

    The merge is last-write-wins per field; nested values are replaced wholesale.
    A ``None`` value unsets the field's override. Fields the subject does not
    expose are dropped, as are values equal to the subject's current in-memory
    value.
    """

    merged: ChangeMap = {**existing, **proposed}
    filtered: ChangeMap = {}
    for name, value in merged.items():
        if value is None:
            continue
        if not subject.has_field(name):
            log.debug("Ignoring change to unknown field %r on %s", name, subject.adjustable_type)
            continue
        if _is_unchanged(subject.get_field(name), value):
            continue
        filtered[name] = value
    return filtered


def _is_unchanged(current: object, proposed: object) -> bool:
    if isinstance(current, bool) or isinstance(proposed, bool):
        return type(current) is type(proposed) and current == proposed
    return current == proposed


class AdjustmentEngine:
    """Merge/filter/apply logic over a :class:`ChangesetStore`.

    The engine never persists the subject itself. ``adjust`` only touches the
    store; ``apply_adjustments`` only touches the in-memory subject.
    """

    def __init__(self, store: ChangesetStore, config: AdjusterConfig) -> None:
        self.store = store
        self.config = config
        self.protection = SaveProtection(default=config.save_protection)

    def subject_key(self, subject: Adjustable) -> tuple[str, str | None]:
        subject_type = subject.adjustable_type if self.config.polymorphic else None
        return subject.adjustable_id, subject_type

    def find_changeset(self, subject: Adjustable, *, lock: bool = False) -> Changeset | None:
        subject_id, subject_type = self.subject_key(subject)
        return self.store.find(subject_id, subject_type, lock=lock)

    def pending_changes(self, subject: Adjustable) -> ChangeMap:
        """Return the decoded staged changes for ``subject`` (empty when none)."""

        changeset = self.find_changeset(subject)
        if changeset is None:
            return {}
        return decode_changes(changeset.changes)

    def adjust(
        self,
        subject: Adjustable,
        changes: Mapping[str, JsonValue],
        attributes: Mapping[str, object] | None = None,
    ) -> Changeset | None:
        """Stage ``changes`` for ``subject`` and return the resulting changeset.

        Returns ``None`` (after deleting any stored changeset) when nothing in the
        merged result differs from the subject's current values.
        """

        existing = self.find_changeset(subject, lock=True)
        existing_changes = decode_changes(existing.changes) if existing is not None else {}
        merged = merge_and_filter_changes(subject, existing_changes, changes)

        if not merged:
            if existing is not None:
                self.store.delete(existing)
                log.info(
                    "Removed changeset for %s %s",
                    subject.adjustable_type,
                    subject.adjustable_id,
                )
            return None

        subject_id, subject_type = self.subject_key(subject)
        changeset = existing or self.config.changeset_model(
            subject_id=subject_id,
            subject_type=subject_type,
        )
        if attributes:
            changeset.attributes.update(attributes)
        changeset.changes = encode_changes(merged, self.store.changes_format)
        saved = self.store.save(changeset)
        log.info(
            "%s changeset for %s %s: fields=%s",
            "Updated" if existing is not None else "Created",
            subject.adjustable_type,
            subject.adjustable_id,
            sorted(merged),
        )
        return saved

    def apply_adjustments[TSubject: Adjustable](self, subject: TSubject) -> TSubject:
        """Overlay the staged changes on the in-memory subject and mark it adjusted."""

        changes = self.pending_changes(subject)
        if not changes:
            return subject

        for name, value in changes.items():
            if not subject.has_field(name):
                log.warning(
                    "Skipping staged change to unknown field %r on %s %s",
                    name,
                    subject.adjustable_type,
                    subject.adjustable_id,
                )
                continue
            subject.set_field(name, value)
        subject.mark_adjusted()
        log.debug("Applied adjustments to %s %s", subject.adjustable_type, subject.adjustable_id)
        return subject

    def has_save_protection(self, subject: Adjustable) -> bool:
        return self.protection.is_enabled(subject)

    def ensure_can_persist(self, subject: Adjustable) -> None:
        """Raise :class:`ModelAdjustedError` if ``subject`` must not be persisted."""

        self.protection.check(subject)
