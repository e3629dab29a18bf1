"""
Cyber Kitchen Backend — Abstract Recipe Repository Interface
==============================================================

What:  Abstract base class defining the contract for recipe collection storage.
How:   Concrete implementations inherit from RecipeRepository and implement
       load() and save().
Who:   Used by the recipes routes through a FastAPI dependency.

Implementations:
    - JsonFileRecipeRepository (file_store.py): one pretty-printed JSON file
    - InMemoryRecipeRepository (below): a list held in memory, used by tests
"""

import copy
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

RecipeCollection = List[Dict[str, Any]]


class RecipeRepository(ABC):
    """
    Abstract interface for persisting the whole recipe collection.

    Contract:
        - load() returns the full collection; corrupt or missing data is an
          empty list, never an exception
        - save() replaces the full collection and returns the item count
        - There are no partial updates and no locking: last save wins
    """

    @abstractmethod
    async def load(self) -> RecipeCollection:
        """
        Return every persisted recipe, in saved order.

        Raises:
            FileStorageError: The backing store exists but cannot be read.
        """

    @abstractmethod
    async def save(self, recipes: RecipeCollection) -> int:
        """
        Replace the persisted collection with `recipes`.

        Returns:
            Number of recipes written.

        Raises:
            FileStorageError: The backing store cannot be written.
        """


class InMemoryRecipeRepository(RecipeRepository):
    """Keeps the collection in a list. Copies on the way in and out."""

    def __init__(self, recipes: Optional[RecipeCollection] = None):
        self._recipes: RecipeCollection = copy.deepcopy(recipes or [])

    async def load(self) -> RecipeCollection:
        return copy.deepcopy(self._recipes)

    async def save(self, recipes: RecipeCollection) -> int:
        self._recipes = copy.deepcopy(recipes)
        return len(self._recipes)
