from __future__ import annotations

import pytest

from adjuster.domain.model import Adjustable
from tests.helpers.subjects import Crate, Fruit, LooseFruit


def test_mixin_satisfies_adjustable_protocol() -> None:
    assert isinstance(Fruit(name="Mango", price=10), Adjustable)


def test_adjustable_fields_exclude_identity_and_private_state() -> None:
    fruit = Fruit(name="Mango", price=10)

    assert fruit.adjustable_fields() == frozenset({"name", "price"})
    assert not fruit.has_field("id")
    assert not fruit.has_field("_adjusted")


def test_allow_list_narrows_adjustable_fields() -> None:
    crate = Crate(label="Apples")

    assert crate.adjustable_fields() == frozenset({"label", "fragile", "dimensions"})
    assert crate.adjustable_type == "crate"


def test_identity_is_stringified() -> None:
    fruit = Fruit(name="Mango", price=10)

    assert fruit.adjustable_id == str(fruit.id)
    assert fruit.adjustable_type == "fruit"


def test_field_access_rejects_unknown_names() -> None:
    crate = Crate(label="Apples")

    with pytest.raises(KeyError):
        crate.get_field("notes")
    with pytest.raises(KeyError):
        crate.set_field("colour", "red")

    crate.set_field("label", "Pears")
    assert crate.get_field("label") == "Pears"


def test_new_subjects_start_clean() -> None:
    fruit = LooseFruit(name="Mango", price=10)

    assert not fruit.is_adjusted
    assert fruit.save_protection is False

    fruit.save_protection = True
    assert fruit.save_protection is True

    fruit.save_protection = None
    assert fruit.save_protection is False
