import pytest

from restpipe import ALL, BadRequestError, Direction, QueryTranslator, Sort


@pytest.fixture
def translator() -> QueryTranslator:
    return QueryTranslator({"name": ALL, "age": ["exact", "gte", "in"], "city": None})


def test_filters_keep_declared_fields_only(translator):
    query = {"name": "bolt", "age__gte": "3", "password": "x", "password__in": "a,b", "limit": "10"}
    assert translator.build_filters(query) == {"name": "bolt", "age__gte": "3"}


def test_filters_reject_undeclared_operator(translator):
    assert translator.build_filters({"age__lt": "3", "city__startswith": "Gh"}) == {"city__startswith": "Gh"}


def test_filters_in_splits_on_comma(translator):
    assert translator.build_filters({"age__in": "1,2,3"}) == {"age__in": ["1", "2", "3"]}


def test_filters_or_groups(translator):
    query = {"name": "bolt", "age__gte": "3", "city": "Ghent", "or": "name,age__gte"}
    assert translator.build_filters(query) == {"city": "Ghent", "or": [{"name": "bolt"}, {"age__gte": "3"}]}


def test_filters_nor_groups(translator):
    query = {"nor": "city,unknown", "city": "Ghent", "name": "bolt"}
    assert translator.build_filters(query) == {"name": "bolt", "nor": [{"city": "Ghent"}]}


def test_filters_empty_group_is_left_out(translator):
    assert translator.build_filters({"or": "password", "name": "x"}) == {"name": "x"}


def test_filters_custom_separator():
    translator = QueryTranslator({"age": ALL}, separator=".")
    assert translator.build_filters({"age.in": "1,2", "age__in": "3"}) == {"age.in": ["1", "2"]}


def test_sorts_keep_order():
    assert QueryTranslator.build_sorts({"order_by": "a,-b"}) == [
        Sort("a", Direction.ASCENDING),
        Sort("b", Direction.DESCENDING),
    ]


def test_sorts_absent():
    assert QueryTranslator.build_sorts({}) == []


def test_sorts_skip_empty_fields():
    sorts = QueryTranslator.build_sorts({"order_by": "-,name,"})
    assert sorts == [Sort("name")]
    assert sorts[0].ascending


@pytest.mark.parametrize(
    "query, expected",
    [
        ({"limit": "500"}, (100, 0)),
        ({"limit": "0"}, (100, 0)),
        ({"limit": "-5"}, (100, 0)),
        ({}, (20, 0)),
        ({"limit": "", "offset": "40"}, (20, 40)),
        ({"limit": "7", "offset": "3"}, (7, 3)),
    ],
)
def test_page(query, expected):
    assert QueryTranslator.build_page(query, 20, 100) == expected


@pytest.mark.parametrize("query", [{"limit": "ten"}, {"offset": "x"}, {"offset": "-1"}])
def test_page_invalid(query):
    with pytest.raises(BadRequestError):
        QueryTranslator.build_page(query, 20, 100)
