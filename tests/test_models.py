import pytest

from domain.errors import BadRequestError, KitchenlyError, NotFoundError, UnauthorizedError
from domain.models import Category, Ingredient, Recipe, RecipeDraft, RecipePatch


def test_recipe_patch_columns_keep_given_order() -> None:
    patch = RecipePatch.from_dict({"servings": 2, "tags": [1], "title": "Soup"})
    assert list(patch.columns()) == ["servings", "title"]
    assert patch.associations() == {"tags": [1]}


def test_recipe_patch_skips_empty_associations() -> None:
    patch = RecipePatch.from_dict({"ingredients": [], "categories": None, "tags": [3, 4]})
    assert patch.columns() == {}
    assert patch.associations() == {"tags": [3, 4]}


def test_recipe_patch_keeps_explicit_null() -> None:
    patch = RecipePatch.from_dict({"cooking_time": None})
    assert patch.columns() == {"cooking_time": None}


def test_recipe_draft_fills_missing_columns() -> None:
    draft = RecipeDraft.model_validate({"username": "user1", "title": "Soup", "tags": [2]})
    assert draft.columns() == {
        "recipe_description": None,
        "preparation_time": None,
        "cooking_time": None,
        "servings": None,
        "username": "user1",
        "title": "Soup",
    }
    assert draft.associations() == {"tags": [2]}


def test_recipe_to_dict_leaves_out_unloaded_associations() -> None:
    recipe = Recipe(id=1, username="user1", title="Soup")
    assert "ingredients" not in recipe.to_dict()

    recipe.ingredients = [Ingredient(id=4, name="leek")]
    recipe.categories = []
    data = recipe.to_dict()
    assert data["ingredients"] == [{"id": 4, "name": "leek"}]
    assert data["categories"] == []
    assert "tags" not in data


def test_lookup_equality_is_per_type() -> None:
    assert Category(id=1, name="x") == Category(id=1, name="x")
    assert Category(id=1, name="x") != Ingredient(id=1, name="x")


@pytest.mark.parametrize(
    "error,status",
    (
        (NotFoundError, 404),
        (BadRequestError, 400),
        (UnauthorizedError, 401),
    ),
)
def test_error_status(error: type[KitchenlyError], status: int) -> None:
    err = error("nope")
    assert isinstance(err, KitchenlyError)
    assert err.to_dict() == {"message": "nope", "status": status}
    assert str(err) == "nope"
