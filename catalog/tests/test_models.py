import unittest

from pydantic import ValidationError

from catalog.errors import InvalidArgumentError
from catalog.models import Recipe, RecipeInput, RecipePage


class RecipeTests(unittest.TestCase):
    def test_document_shape(self):
        recipe = Recipe(
            title="Lemon Tart",
            ingredients=["Lemon"],
            instructions="Bake.",
            cooking_time=45,
            category="Desserts",
            created_by="alice",
        )
        doc = recipe.as_document()
        self.assertNotIn("id", doc)
        self.assertEqual(doc["cookingTime"], 45)
        self.assertEqual(doc["createdBy"], "alice")
        self.assertEqual(Recipe.from_document({**doc, "id": "abc"}).id, "abc")

    def test_from_sparse_document(self):
        recipe = Recipe.from_document({"id": "x", "title": "Toast"})
        self.assertEqual(recipe.ingredients, [])
        self.assertIsNone(recipe.cooking_time)
        self.assertIsNone(recipe.category)


class RecipeInputTests(unittest.TestCase):
    def valid(self, **overrides):
        data = {
            "title": "Lemon Tart",
            "ingredients": ["Lemon"],
            "instructions": "Bake.",
            "cooking_time": 45,
        }
        data.update(overrides)
        return data

    def test_to_recipe(self):
        recipe = RecipeInput.model_validate(self.valid(category="Desserts")).to_recipe()
        self.assertEqual(recipe.title, "Lemon Tart")
        self.assertEqual(recipe.category, "Desserts")
        self.assertIsNone(recipe.id)
        self.assertIsNone(recipe.created_by)

    def test_rejects_invalid_input(self):
        for overrides in (
            {"title": "   "},
            {"ingredients": []},
            {"instructions": ""},
            {"cooking_time": 0},
        ):
            with self.subTest(overrides=overrides):
                with self.assertRaises(ValidationError):
                    RecipeInput.model_validate(self.valid(**overrides))

    def test_cooking_time_is_optional(self):
        data = self.valid()
        del data["cooking_time"]
        self.assertIsNone(RecipeInput.model_validate(data).cooking_time)


class RecipePageTests(unittest.TestCase):
    def test_last_page(self):
        items = [Recipe(title=str(i)) for i in range(3)]
        page = RecipePage.from_items(items, page_no=1, page_size=2)
        self.assertEqual([r.title for r in page.content], ["2"])
        self.assertTrue(page.last)

    def test_empty(self):
        page = RecipePage.from_items([], page_no=0, page_size=5)
        self.assertEqual(page.total_pages, 0)
        self.assertEqual(page.content, [])
        self.assertTrue(page.last)

    def test_invalid_arguments(self):
        with self.assertRaises(InvalidArgumentError):
            RecipePage.from_items([], page_no=-1)
        with self.assertRaises(InvalidArgumentError):
            RecipePage.from_items([], page_size=0)


if __name__ == "__main__":
    unittest.main()
