from __future__ import annotations

from domain.catalog.index import EMPTY_INDEX, Collection, EntityKey, build_indices


def test_three_key_equivalence(cafe, index):
    for collection in Collection:
        for entity in getattr(cafe, collection.value):
            assert index.lookup(collection, entity.id) is entity
            if entity.hash_id:
                assert index.lookup(collection, entity.hash_id) is entity
            if entity.slug:
                found = index.lookup(collection, entity.slug)
                assert found is entity


def test_slug_does_not_collide_with_numeric_id(index):
    by_id = index.lookup(Collection.CATEGORIES, 10)
    by_slug = index.lookup(Collection.CATEGORIES, "10")
    assert by_id.name == "Pasta"
    assert by_slug.name == "Sweets"


def test_entity_key_normalization():
    assert EntityKey.of(5) == EntityKey("id", 5)
    assert EntityKey.of("abc") == EntityKey("ref", "abc")
    assert EntityKey.of("") is None
    assert EntityKey.of(None) is None
    assert EntityKey.of(True) is None


def test_variant_maps_skip_placeholder(index):
    assert 0 not in index.variants
    assert set(index.variants) == {1001, 1021, 1031}
    assert index.variant_dishes[1021].name == "Lemonade"


def test_relations_drop_unresolved_ids(index):
    menu, categories = index.menu_categories[1]
    assert menu.name == "Main"
    assert [c.id for c in categories] == [10, 11]

    _, dishes = index.category_dishes[10]
    assert [d.id for d in dishes] == [100, 101]


def test_option_maps(index):
    assert index.options[50].name == "Extras"
    assert index.option_items[502].price == 50
    assert index.option_by_item[511].id == 51
    assert index.discounts[3].type == "value"


def test_empty_snapshot_gives_empty_index():
    idx = build_indices(None)
    assert idx is EMPTY_INDEX
    assert idx.lookup(Collection.DISHES, 100) is None
    assert idx.variants == {}
    assert idx.is_for(None) is False


def test_rebuild_is_idempotent(cafe, index):
    again = build_indices(cafe)
    assert again is not index
    assert again.entities == index.entities
    assert again.variants == index.variants
    assert again.variant_dishes == index.variant_dishes
    assert again.menu_categories == index.menu_categories
    assert again.category_dishes == index.category_dishes
    assert again.option_by_item == index.option_by_item


def test_index_bound_to_snapshot_object(cafe, index, cafe_payload):
    from domain.catalog.schema import Cafe

    assert index.is_for(cafe)
    equal_but_other = Cafe.model_validate(cafe_payload)
    assert not index.is_for(equal_but_other)


def test_counts(index):
    counts = index.counts()
    assert counts["dishes"] == 4
    assert counts["variants"] == 3
    assert counts["option_items"] == 3
