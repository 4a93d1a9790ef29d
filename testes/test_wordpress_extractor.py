import json

import pytest

from conftest import cdata, make_item
from wp2contentful.extractors.wordpress_extractor import (
    extract_categories,
    load_export,
    split_data_by_post_type,
)


def test_items_grouped_by_post_type(export_data):
    content = split_data_by_post_type(export_data)
    assert sorted(content) == ["attachment", "furniture", "page"]
    assert len(content["attachment"]) == 2
    assert content["page"][0]["wp:post_name"] == cdata("about")


def test_excluded_types_are_dropped(export_data):
    content = split_data_by_post_type(export_data)
    assert "nav_menu_item" not in content


def test_order_within_group_follows_export():
    items = [make_item("page", n, f"page-{n}", f"Page {n}") for n in (3, 1, 2)]
    content = split_data_by_post_type({"rss": {"channel": {"item": items}}})
    assert [i["wp:post_name"]["_cdata"] for i in content["page"]] == ["page-3", "page-1", "page-2"]


def test_unknown_types_pass_through():
    items = [make_item("product", 1, "thing", "Thing")]
    assert list(split_data_by_post_type({"rss": {"channel": {"item": items}}})) == ["product"]


def test_single_item_is_not_a_list():
    data = {"rss": {"channel": {"item": make_item("page", 1, "solo", "Solo")}}}
    assert len(split_data_by_post_type(data)["page"]) == 1


def test_custom_skip_list(export_data):
    content = split_data_by_post_type(export_data, skip=["attachment"])
    assert "attachment" not in content
    assert "nav_menu_item" in content


def test_extract_categories(export_data):
    assert extract_categories(export_data) == [
        {"title": "Chairs", "slug": "chairs", "category_id": "3"},
        {"title": "Tables", "slug": "tables", "category_id": "4"},
    ]


def test_load_export_rejects_other_documents(tmp_path):
    path = tmp_path / "data.json"
    path.write_text(json.dumps({"feed": {}}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_export(str(path))


def test_load_export_reads_json(tmp_path, export_data):
    path = tmp_path / "data.json"
    path.write_text(json.dumps(export_data), encoding="utf-8")
    assert load_export(str(path)) == export_data
