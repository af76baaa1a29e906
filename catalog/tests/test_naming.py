import unittest

from catalog.naming import DEFAULT_NAMING, PartitionNaming, is_blank, partition_name


class PartitionNamingTests(unittest.TestCase):
    def test_case_and_whitespace_are_normalized(self):
        self.assertEqual(partition_name("Main  Course"), "recipe_main_course")
        self.assertEqual(partition_name("main course"), "recipe_main_course")
        self.assertEqual(partition_name("  Main\tCourse \n"), "recipe_main_course")

    def test_blank_categories_use_the_default(self):
        for category in (None, "", "   "):
            self.assertEqual(partition_name(category), "recipe_uncategorized")

    def test_normalize_is_idempotent(self):
        once = DEFAULT_NAMING.normalize("  Quick  Weeknight Dinners ")
        self.assertEqual(once, "quick_weeknight_dinners")
        self.assertEqual(DEFAULT_NAMING.normalize(once), once)

    def test_listed_category_maps_back_to_its_partition(self):
        for partition in ("recipe_desserts", "recipe_main_course", "recipe_recipe_book"):
            category = DEFAULT_NAMING.category_for(partition)
            self.assertEqual(DEFAULT_NAMING.partition_for(category), partition)

    def test_category_for_rejects_foreign_names(self):
        with self.assertRaises(ValueError):
            DEFAULT_NAMING.category_for("users")

    def test_custom_prefix_and_default(self):
        naming = PartitionNaming(prefix="dish_", default_category="Misc")
        self.assertEqual(naming.partition_for(None), "dish_misc")
        self.assertEqual(naming.default_partition, "dish_misc")
        self.assertTrue(naming.is_default_partition("dish_misc"))
        self.assertFalse(naming.is_partition("recipe_misc"))

    def test_is_blank(self):
        self.assertTrue(is_blank(None))
        self.assertTrue(is_blank(" \t"))
        self.assertFalse(is_blank("Soups"))


if __name__ == "__main__":
    unittest.main()
