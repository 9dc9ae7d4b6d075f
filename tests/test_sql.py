import pytest

from domain.errors import BadRequestError
from domain.sql import paired_rows, placeholders, sql_for_partial_update


def test_partial_update_keeps_key_order() -> None:
    set_cols, values = sql_for_partial_update(
        {"title": "Soup", "servings": 4, "cooking_time": None}
    )
    assert set_cols == "title = :set1, servings = :set2, cooking_time = :set3"
    assert list(values.items()) == [("set1", "Soup"), ("set2", 4), ("set3", None)]


def test_partial_update_remaps_fields() -> None:
    set_cols, values = sql_for_partial_update(
        {"firstName": "Aloy", "age": 32},
        {"firstName": "first_name"},
    )
    assert set_cols == "first_name = :set1, age = :set2"
    assert values == {"set1": "Aloy", "set2": 32}


def test_partial_update_no_data() -> None:
    with pytest.raises(BadRequestError):
        sql_for_partial_update({})


@pytest.mark.parametrize("field", ["title; DROP TABLE recipes", "a b", "1abc"])
def test_partial_update_rejects_non_identifiers(field: str) -> None:
    with pytest.raises(BadRequestError):
        sql_for_partial_update({field: "x"})


def test_placeholders() -> None:
    clause, values = placeholders([7, 9, 11])
    assert clause == ":id1, :id2, :id3"
    assert values == {"id1": 7, "id2": 9, "id3": 11}


def test_placeholders_prefix() -> None:
    clause, values = placeholders(["salt"], prefix="name")
    assert clause == ":name1"
    assert values == {"name1": "salt"}


def test_paired_rows_share_first_column() -> None:
    rows, values = paired_rows("recipe_id", 3, [5, 6])
    assert rows == "(:recipe_id, :id1), (:recipe_id, :id2)"
    assert values == {"recipe_id": 3, "id1": 5, "id2": 6}


def test_paired_rows_empty() -> None:
    with pytest.raises(BadRequestError):
        paired_rows("recipe_id", 3, [])
