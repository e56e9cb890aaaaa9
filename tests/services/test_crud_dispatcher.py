"""CRUD Dispatcher tests - verb policy over an in-memory model layer.

Invariants verified:
    - Path identifiers are folded into the predicate under "id"
    - Empty predicate on POST/PUT creates (the documented sharp edge), never updates
    - POST keeps unspecified attributes, PUT clears them
    - Deletes succeed whatever matched
    - Plural reads return Found([]) on zero matches (404 is the mapper's job)
"""

import pytest

from autorest.core.domain_types import (
    Created, Deleted, Found, NotFound, RouteShape,
)
from autorest.core.query_translator import ParsedQuery
from autorest.services.crud_dispatcher import (
    create_or_update_many, create_or_update_one, dispatch, read_many, read_one,
    remove_many, remove_one, replace_or_create_many, replace_or_create_one,
    with_identifier,
)
from tests.services.fake_model import FakeModel


@pytest.fixture
def model():
    return FakeModel([
        {"id": 1, "name": "a", "age": 5},
        {"id": 2, "name": "b", "age": 5},
        {"id": 3, "name": "c", "age": 9},
    ])


def _query(predicate=None, **options):
    return ParsedQuery(predicate=predicate or {}, options=options)


# ─── Identifier folding ─────────────────────────────────────────

def test_identifier_folded_into_predicate():
    query = with_identifier(_query({"name": "a"}, limit=1), "7")
    assert query.predicate == {"name": "a", "id": "7"}
    assert query.options == {"limit": 1}


def test_missing_identifier_leaves_query_untouched():
    query = _query({"name": "a"})
    assert with_identifier(query, None) is query


# ─── Singular ───────────────────────────────────────────────────

async def test_read_one_by_identifier(model):
    outcome = await read_one(model, _query(), "2")
    assert outcome == Found({"id": 2, "name": "b", "age": 5})


async def test_read_one_without_match_is_not_found(model):
    assert await read_one(model, _query(), "99") == NotFound()


async def test_post_with_empty_predicate_creates(model):
    outcome = await create_or_update_one(model, _query(), {"name": "d"})
    assert outcome == Created({"name": "d", "id": 4})
    assert not model.called("update")


async def test_post_with_predicate_updates_partially(model):
    outcome = await create_or_update_one(model, _query(), {"name": "z"}, "1")
    assert outcome == Found({"id": 1, "name": "z", "age": 5})
    assert not model.called("spawn")


async def test_post_with_predicate_and_no_match_is_not_found(model):
    outcome = await create_or_update_one(model, _query({"name": "nobody"}), {"age": 1})
    assert outcome == NotFound()
    assert len(model.rows) == 3


async def test_put_replaces_whole_attribute_set(model):
    outcome = await replace_or_create_one(model, _query(), {"name": "b2"}, "1")
    assert outcome == Found({"id": 1, "name": "b2"})
    assert model.rows[0] == {"id": 1, "name": "b2"}


async def test_put_with_no_match_is_not_found_and_creates_nothing(model):
    outcome = await replace_or_create_one(model, _query(), {"name": "x"}, "42")
    assert outcome == NotFound()
    assert not model.called("spawn")
    assert len(model.rows) == 3


async def test_put_with_empty_predicate_creates(model):
    outcome = await replace_or_create_one(model, _query(), {"name": "new"})
    assert isinstance(outcome, Created)
    assert outcome.value["id"] == 4


async def test_delete_one_without_match_still_succeeds(model):
    assert await remove_one(model, _query(), "99") == Deleted()
    assert len(model.rows) == 3


async def test_delete_one_removes_match(model):
    assert await remove_one(model, _query(), "3") == Deleted()
    assert [r["id"] for r in model.rows] == [1, 2]


# ─── Plural ─────────────────────────────────────────────────────

async def test_read_many_returns_all_matches(model):
    outcome = await read_many(model, _query({"age": 5}))
    assert [e["id"] for e in outcome.value] == [1, 2]


async def test_read_many_without_match_is_found_empty(model):
    assert await read_many(model, _query({"age": 100})) == Found([])


async def test_post_many_with_empty_predicate_bulk_creates(model):
    outcome = await create_or_update_many(
        model, _query(), [{"name": "d"}, {"name": "e"}],
    )
    assert isinstance(outcome, Created)
    assert [e["id"] for e in outcome.value] == [4, 5]


async def test_post_many_with_predicate_updates_all_matches(model):
    outcome = await create_or_update_many(model, _query({"age": 5}), {"age": 6})
    assert outcome == Found([
        {"id": 1, "name": "a", "age": 6}, {"id": 2, "name": "b", "age": 6},
    ])
    assert model.rows[2]["age"] == 9


async def test_put_many_replaces_every_match_with_single_body(model):
    outcome = await replace_or_create_many(model, _query({"age": 5}), {"name": "r"})
    assert outcome == Found([{"id": 1, "name": "r"}, {"id": 2, "name": "r"}])
    assert model.called("persist_many")


async def test_put_many_with_empty_predicate_bulk_creates(model):
    outcome = await replace_or_create_many(model, _query(), [{"name": "d"}])
    assert outcome == Created([{"name": "d", "id": 4}])


async def test_delete_many_without_match_still_succeeds(model):
    assert await remove_many(model, _query({"age": 100})) == Deleted()
    assert len(model.rows) == 3


async def test_delete_many_removes_all_matches(model):
    await remove_many(model, _query({"age": 5}))
    assert [r["id"] for r in model.rows] == [3]


# ─── Dispatch table ─────────────────────────────────────────────

async def test_dispatch_routes_singular_put_with_identifier(model):
    outcome = await dispatch(
        RouteShape.SINGULAR, "put", model, _query(), {"name": "q"}, "2",
    )
    assert outcome == Found({"id": 2, "name": "q"})


async def test_dispatch_routes_plural_get(model):
    outcome = await dispatch(RouteShape.PLURAL, "GET", model, _query({"age": 9}))
    assert outcome == Found([{"id": 3, "name": "c", "age": 9}])


async def test_dispatch_singular_delete_ignores_body(model):
    outcome = await dispatch(
        RouteShape.SINGULAR, "DELETE", model, _query(), {"ignored": 1}, "1",
    )
    assert outcome == Deleted()


async def test_dispatch_rejects_unknown_method(model):
    with pytest.raises(ValueError):
        await dispatch(RouteShape.PLURAL, "PATCH", model, _query())


async def test_empty_filter_on_write_creates_instead_of_updating_everything(model):
    """Sharp edge: an empty filter on POST means create, not update-all."""
    outcome = await dispatch(RouteShape.PLURAL, "POST", model, _query(), [{"age": 1}])
    assert isinstance(outcome, Created)
    assert [r["age"] for r in model.rows] == [5, 5, 9, 1]
