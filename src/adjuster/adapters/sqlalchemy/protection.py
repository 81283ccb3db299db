"""ORM event hooks enforcing save protection for adjusted subjects."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import event, inspect

from adjuster.domain.model import Adjustable

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from sqlalchemy.orm import Session, UOWTransaction, sessionmaker

    from adjuster.domain.adjustments.protection import SaveProtection

log = logging.getLogger(__name__)


def install_save_protection(
    target: Session | sessionmaker[Session] | type[Session],
    protection: SaveProtection,
) -> Callable[[], None]:
    """Refuse flushes that would write a Shadowed, protected subject.

    Returns a callable that removes the listener again.
    """

    def before_flush(
        session: Session,
        flush_context: UOWTransaction,
        instances: Iterable[object] | None,
    ) -> None:
        _ = flush_context, instances
        for instance in (*session.new, *session.dirty):
            if isinstance(instance, Adjustable):
                protection.check(instance)

    event.listen(target, "before_flush", before_flush)
    log.debug("Installed save protection on %r (default=%s)", target, protection.default)

    def remove() -> None:
        event.remove(target, "before_flush", before_flush)

    return remove


def reset_adjusted_on_reload(subject_cls: type[Adjustable]) -> None:
    """Return instances of a mapped subject class to Clean when the ORM reloads them.

    Only instances without pending modifications are reset; a partial reload of
    expired attributes keeps the overlay (and its flag) intact. Call once per mapped
    class, after mapping it.
    """

    def on_load(target: Adjustable, *_: object) -> None:
        if not inspect(target).modified:
            target.clear_adjusted()

    event.listen(subject_cls, "load", on_load)
    event.listen(subject_cls, "refresh", on_load)
