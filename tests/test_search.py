from __future__ import annotations

from domain.catalog.search import search, tokenize, tokens_match


def _by_category(result):
    return {m.category_id: m for m in result.categories}


def test_tokenize():
    assert tokenize("Pasta  Carbonara ") == ["pasta", "carbonara"]
    assert tokenize("") == [""]
    assert tokenize(None) == [""]


def test_bidirectional_substring():
    assert tokens_match(["past"], ["pasta"])
    assert tokens_match(["pastas"], ["pasta"])
    assert tokens_match(["arbo"], ["carbonara"])
    assert not tokens_match(["soup"], ["pasta", "carbonara"])


def test_dish_match_case_insensitive(cafe, index):
    result = search(cafe, "PASTA", index=index)
    pasta = _by_category(result)[10]
    assert pasta.dishes_ids == [100, 101]
    assert result.dishes_count == 2


def test_dish_match_needs_category_match(cafe, index):
    # "Pasta Carbonara" 는 맞지만 카테고리 "Pasta" 가 안 맞으므로 결과 없음
    result = search(cafe, "carbonara", index=index)
    assert result.categories == []
    assert result.categories_count == 0
    assert result.dishes_count == 0


def test_dish_filtered_within_matching_category(cafe):
    result = search(cafe, "cold lemonade")
    matches = _by_category(result)
    assert set(matches) == {11}
    assert matches[11].dishes_ids == [102]
    assert result.categories_count == 1
    assert result.dishes_count == 1


def test_category_match_without_dishes(cafe):
    result = search(cafe, "cold")
    matches = _by_category(result)
    assert matches[11].dishes_ids == []
    assert result.dishes_count == 0


def test_empty_query_matches_everything(cafe):
    result = search(cafe, "")
    assert result.categories_count == len(cafe.categories)
    # 카테고리에서 resolve 가능한 디시 전부
    assert result.dishes_count == 4


def test_no_match(cafe):
    result = search(cafe, "sushi")
    assert result.categories == []
    assert result.categories_count == 0
    assert result.dishes_count == 0


def test_menu_scope(cafe, index):
    result = search(cafe, "", menu="m2h", index=index)
    assert [m.category_id for m in result.categories] == [12]


def test_no_snapshot():
    result = search(None, "pasta")
    assert result.categories == []
