import unittest

from catalog.documents import Criterion, InMemoryDocumentStore, matches_all
from catalog.errors import StorageUnavailableError


class CriterionTests(unittest.TestCase):
    def test_icontains_is_case_insensitive(self):
        doc = {"title": "Lemon Tart"}
        self.assertTrue(Criterion("title", "icontains", "lemon").matches(doc))
        self.assertTrue(Criterion("title", "icontains", "TART").matches(doc))
        self.assertFalse(Criterion("title", "icontains", "pie").matches(doc))

    def test_icontains_on_lists_matches_any_element(self):
        doc = {"ingredients": ["Flour", "Lemon juice"]}
        self.assertTrue(Criterion("ingredients", "icontains", "juice").matches(doc))
        self.assertFalse(Criterion("ingredients", "icontains", "sugar").matches(doc))

    def test_lte_and_missing_fields(self):
        self.assertTrue(Criterion("cookingTime", "lte", 45).matches({"cookingTime": 45}))
        self.assertFalse(Criterion("cookingTime", "lte", 40).matches({"cookingTime": 45}))
        self.assertFalse(Criterion("cookingTime", "lte", 40).matches({"cookingTime": None}))
        self.assertFalse(Criterion("createdBy", "eq", "alice").matches({}))

    def test_matches_all_with_no_criteria(self):
        self.assertTrue(matches_all({"title": "anything"}, []))

    def test_unknown_operator(self):
        with self.assertRaises(ValueError):
            Criterion("title", "regex", "x")


class InMemoryDocumentStoreTests(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryDocumentStore()

    def test_create_partition_is_idempotent(self):
        self.store.create_partition("recipe_soups")
        self.store.insert("recipe_soups", {"title": "Minestrone"})
        self.store.create_partition("recipe_soups")
        self.assertEqual(self.store.count("recipe_soups"), 1)

    def test_insert_assigns_id_and_copies(self):
        doc = {"title": "Minestrone"}
        stored = self.store.insert("recipe_soups", doc)
        self.assertTrue(stored["id"])
        self.assertNotIn("id", doc)
        stored["title"] = "changed"
        self.assertEqual(
            self.store.find_one("recipe_soups", stored["id"])["title"], "Minestrone"
        )

    def test_find_keeps_insertion_order(self):
        for title in ("a", "b", "c"):
            self.store.insert("recipe_x", {"title": title})
        self.assertEqual([d["title"] for d in self.store.find("recipe_x")], ["a", "b", "c"])

    def test_missing_partition_reads_are_empty(self):
        self.assertEqual(self.store.find("recipe_none"), [])
        self.assertIsNone(self.store.find_one("recipe_none", "x"))
        self.assertEqual(self.store.count("recipe_none"), 0)
        self.assertEqual(self.store.remove("recipe_none", "x"), 0)

    def test_save_upserts(self):
        stored = self.store.insert("recipe_x", {"title": "a"})
        self.store.save("recipe_x", {**stored, "title": "b"})
        self.assertEqual(self.store.count("recipe_x"), 1)
        self.assertEqual(self.store.find_one("recipe_x", stored["id"])["title"], "b")

    def test_offline_store_raises(self):
        self.store.available = False
        with self.assertRaises(StorageUnavailableError):
            self.store.list_partitions()
        with self.assertRaises(StorageUnavailableError):
            self.store.ping()


if __name__ == "__main__":
    unittest.main()
