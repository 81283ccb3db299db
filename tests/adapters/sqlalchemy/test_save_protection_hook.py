"""Save protection enforced on flush for mapped subjects."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy.orm import Session

from adjuster.adapters.sqlalchemy import install_save_protection
from adjuster.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyAdjustmentUnitOfWork,
    shutdown,
    startup,
)
from adjuster.config import AdjusterConfig
from adjuster.domain.adjustments import ModelAdjustedError, SaveProtection
from tests.helpers.orm import GuardedFruit, StoredFruit

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from uuid import UUID

    from sqlalchemy.engine import Engine

    UnitOfWorkFactory = Callable[[], SqlAlchemyAdjustmentUnitOfWork]


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def _store[TFruit: StoredFruit | GuardedFruit](
    factory: UnitOfWorkFactory, fruit: TFruit
) -> TFruit:
    with factory() as uow:
        uow.session.add(fruit)
        uow.commit()
    return fruit


def _stage_price(factory: UnitOfWorkFactory, fruit_cls: type, fruit_id: UUID) -> None:
    with factory() as uow:
        subject = uow.session.get(fruit_cls, fruit_id)
        assert subject is not None
        uow.adjustments.adjust(subject, {"price": 20})
        uow.commit()


def _stored_price(factory: UnitOfWorkFactory, fruit_cls: type, fruit_id: UUID) -> int:
    with factory() as uow:
        subject = uow.session.get(fruit_cls, fruit_id)
        assert subject is not None
        return subject.price


def test_protected_subject_is_not_written(
    sqlite_unit_of_work: UnitOfWorkFactory,
) -> None:
    mango = _store(sqlite_unit_of_work, StoredFruit(name="Mango", price=10))
    _stage_price(sqlite_unit_of_work, StoredFruit, mango.id)

    with sqlite_unit_of_work() as uow:
        subject = uow.session.get(StoredFruit, mango.id)
        assert subject is not None
        assert not subject.is_adjusted
        uow.adjustments.apply_adjustments(subject)
        assert subject.price == 20

        with pytest.raises(ModelAdjustedError):
            uow.commit()

    assert _stored_price(sqlite_unit_of_work, StoredFruit, mango.id) == 10
    with sqlite_unit_of_work() as uow:
        subject = uow.session.get(StoredFruit, mango.id)
        assert subject is not None
        assert uow.adjustments.pending_changes(subject) == {"price": 20}


def test_instance_override_commits_overlay(
    sqlite_unit_of_work: UnitOfWorkFactory,
) -> None:
    mango = _store(sqlite_unit_of_work, StoredFruit(name="Mango", price=10))
    _stage_price(sqlite_unit_of_work, StoredFruit, mango.id)

    with sqlite_unit_of_work() as uow:
        subject = uow.session.get(StoredFruit, mango.id)
        assert subject is not None
        uow.adjustments.apply_adjustments(subject)
        subject.save_protection = False
        uow.commit()

    assert _stored_price(sqlite_unit_of_work, StoredFruit, mango.id) == 20


def test_global_flag_disables_protection(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, config=AdjusterConfig(save_protection=False), force=True)
    mango = _store(SqlAlchemyAdjustmentUnitOfWork, StoredFruit(name="Mango", price=10))
    _stage_price(SqlAlchemyAdjustmentUnitOfWork, StoredFruit, mango.id)

    with SqlAlchemyAdjustmentUnitOfWork() as uow:
        subject = uow.session.get(StoredFruit, mango.id)
        assert subject is not None
        uow.adjustments.apply_adjustments(subject)
        uow.commit()

    assert _stored_price(SqlAlchemyAdjustmentUnitOfWork, StoredFruit, mango.id) == 20


def test_class_and_instance_overrides_beat_disabled_global_flag(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, config=AdjusterConfig(save_protection=False), force=True)
    guarded = _store(SqlAlchemyAdjustmentUnitOfWork, GuardedFruit(name="Lime", price=10))
    mango = _store(SqlAlchemyAdjustmentUnitOfWork, StoredFruit(name="Mango", price=10))
    _stage_price(SqlAlchemyAdjustmentUnitOfWork, GuardedFruit, guarded.id)
    _stage_price(SqlAlchemyAdjustmentUnitOfWork, StoredFruit, mango.id)

    with SqlAlchemyAdjustmentUnitOfWork() as uow:
        subject = uow.session.get(GuardedFruit, guarded.id)
        assert subject is not None
        uow.adjustments.apply_adjustments(subject)
        with pytest.raises(ModelAdjustedError):
            uow.commit()

    with SqlAlchemyAdjustmentUnitOfWork() as uow:
        fruit = uow.session.get(StoredFruit, mango.id)
        assert fruit is not None
        uow.adjustments.apply_adjustments(fruit)
        fruit.save_protection = True
        with pytest.raises(ModelAdjustedError):
            uow.commit()

    assert _stored_price(SqlAlchemyAdjustmentUnitOfWork, GuardedFruit, guarded.id) == 10
    assert _stored_price(SqlAlchemyAdjustmentUnitOfWork, StoredFruit, mango.id) == 10


def test_refresh_returns_subject_to_clean(
    sqlite_unit_of_work: UnitOfWorkFactory,
) -> None:
    mango = _store(sqlite_unit_of_work, StoredFruit(name="Mango", price=10))
    _stage_price(sqlite_unit_of_work, StoredFruit, mango.id)

    with sqlite_unit_of_work() as uow:
        subject = uow.session.get(StoredFruit, mango.id)
        assert subject is not None
        uow.adjustments.apply_adjustments(subject)
        assert subject.is_adjusted

        uow.session.refresh(subject)

        assert not subject.is_adjusted
        assert subject.price == 10
        uow.commit()


def test_new_subjects_pass_through_hook(sqlite_engine: Engine) -> None:
    session = Session(sqlite_engine)
    remove = install_save_protection(session, SaveProtection())
    try:
        fruit = StoredFruit(name="Mango", price=10)
        fruit.mark_adjusted()
        session.add(fruit)
        with pytest.raises(ModelAdjustedError):
            session.flush()
        session.rollback()

        remove()
        session.add(fruit)
        session.commit()
        assert session.get(StoredFruit, fruit.id) is fruit
    finally:
        session.close()
