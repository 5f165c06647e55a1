"""
Unit tests for category path rendering
"""

from catalog.readers.category_paths import collect_ids, join_path, render, split_path


class TestCategoryPaths:

    def test_render_root_to_leaf(self):
        names = {3: "Shoes", 7: "Men", 9: "Boots"}
        assert render("3|7", 9, names) == "Shoes->Men->Boots"

    def test_render_drops_unknown_ids(self):
        names = {3: "Shoes", 9: "Boots"}
        assert render("3|7", 9, names) == "Shoes->Boots"

    def test_render_root_category(self):
        assert render("", 3, {3: "Shoes"}) == "Shoes"
        assert render(None, 3, {3: "Shoes"}) == "Shoes"

    def test_split_and_join(self):
        assert split_path("3|7") == [3, 7]
        assert split_path("|3||7|") == [3, 7]
        assert join_path([3, 7]) == "3|7"
        assert join_path([]) == ""

    def test_collect_ids_is_distinct(self):
        rows = [
            {"categoryId": 9, "categoryPath": "3|7"},
            {"categoryId": 7, "categoryPath": "3"},
        ]
        assert collect_ids(rows) == [9, 3, 7]
