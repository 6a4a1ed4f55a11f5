"""Recipe explorer: quality screening, filtering and pagination."""

from cookgpt.explore.filters import RecipeFilters, filter_recipes, paginate
from cookgpt.explore.quality import load_explorer_recipes

__all__ = ["RecipeFilters", "filter_recipes", "load_explorer_recipes", "paginate"]
