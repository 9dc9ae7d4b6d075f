from datetime import datetime
from typing import Any, Mapping, Self

from pydantic import BaseModel, ConfigDict, PrivateAttr


class Lookup:
    """A named row shared between many recipes."""

    def __init__(self, *, id: int, name: str) -> None:
        self.id = id
        self.name = name

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Self:
        return cls(id=row["id"], name=row["name"])

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(id={self.id}, name={self.name})>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Lookup):
            return NotImplemented
        return (type(self), self.id, self.name) == (type(other), other.id, other.name)

    def __hash__(self) -> int:
        return hash((type(self), self.id, self.name))

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}


class Ingredient(Lookup):
    pass


class Category(Lookup):
    pass


class Tag(Lookup):
    pass


class Recipe:
    def __init__(
        self,
        *,
        id: int,
        username: str,
        title: str,
        recipe_description: str | None = None,
        preparation_time: int | None = None,
        cooking_time: int | None = None,
        servings: int | None = None,
        created_at: datetime | str | None = None,
        ingredients: list[Ingredient] | None = None,
        categories: list[Category] | None = None,
        tags: list[Tag] | None = None,
    ) -> None:
        self.id = id
        self.username = username
        self.title = title
        self.recipe_description = recipe_description
        self.preparation_time = preparation_time
        self.cooking_time = cooking_time
        self.servings = servings
        self.created_at = created_at
        # None means "not loaded", as returned by list queries.
        self.ingredients = ingredients
        self.categories = categories
        self.tags = tags

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Self:
        return cls(
            id=row["id"],
            username=row["username"],
            title=row["title"],
            recipe_description=row.get("recipe_description"),
            preparation_time=row.get("preparation_time"),
            cooking_time=row.get("cooking_time"),
            servings=row.get("servings"),
            created_at=row.get("created_at"),
        )

    def __repr__(self) -> str:
        return f"<Recipe(id={self.id}, title={self.title})>"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "username": self.username,
            "title": self.title,
            "recipe_description": self.recipe_description,
            "preparation_time": self.preparation_time,
            "cooking_time": self.cooking_time,
            "servings": self.servings,
            "created_at": self.created_at,
        }
        for field in ("ingredients", "categories", "tags"):
            linked: list[Lookup] | None = getattr(self, field)
            if linked is not None:
                data[field] = [item.to_dict() for item in linked]
        return data


class User:
    def __init__(
        self,
        *,
        username: str,
        first_name: str,
        last_name: str,
        email: str,
        is_admin: bool = False,
        recipes: list[Recipe] | None = None,
        favorites: list[Recipe] | None = None,
    ) -> None:
        self.username = username
        self.first_name = first_name
        self.last_name = last_name
        self.email = email
        self.is_admin = is_admin
        self.recipes = recipes
        self.favorites = favorites

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Self:
        return cls(
            username=row["username"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            email=row["email"],
            is_admin=bool(row["is_admin"]),
        )

    def __repr__(self) -> str:
        return f"<User(username={self.username})>"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "username": self.username,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "is_admin": self.is_admin,
        }
        if self.recipes is not None:
            data["recipes"] = [r.to_dict() for r in self.recipes]
        if self.favorites is not None:
            data["favorites"] = [r.to_dict() for r in self.favorites]
        return data


ASSOCIATION_FIELDS = ("ingredients", "categories", "tags")


class _RecipeFields(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    recipe_description: str | None = None
    preparation_time: int | None = None
    cooking_time: int | None = None
    servings: int | None = None
    ingredients: list[int] | None = None
    categories: list[int] | None = None
    tags: list[int] | None = None

    def associations(self) -> dict[str, list[int]]:
        """Association sets to link. Empty or null sets are ignored."""
        return {
            field: getattr(self, field)
            for field in ASSOCIATION_FIELDS
            if getattr(self, field)
        }


class RecipeDraft(_RecipeFields):
    """Fields a new recipe is created from."""

    username: str
    title: str

    def columns(self) -> dict[str, Any]:
        return self.model_dump(exclude=set(ASSOCIATION_FIELDS))


class RecipePatch(_RecipeFields):
    """Fields a recipe update may carry. Unset fields are left alone."""

    _order: tuple[str, ...] = PrivateAttr(default=())

    title: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        patch = cls.model_validate(data)
        patch._order = tuple(data)
        return patch

    def columns(self) -> dict[str, Any]:
        """Scalar columns to assign, in the order they were given."""
        order = self._order or tuple(type(self).model_fields)
        return {
            field: getattr(self, field)
            for field in order
            if field in self.model_fields_set and field not in ASSOCIATION_FIELDS
        }
