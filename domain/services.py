from databases import Database

from domain.lookups import CategoryRepository, IngredientRepository, TagRepository
from domain.repository import RecipeRepository
from domain.users import UserRepository


class Kitchen:
    """Every repository over one database handle."""

    def __init__(self, db: Database) -> None:
        self.db = db
        self.recipes = RecipeRepository(db)
        self.ingredients = IngredientRepository(db)
        self.categories = CategoryRepository(db)
        self.tags = TagRepository(db)
        self.users = UserRepository(db)
