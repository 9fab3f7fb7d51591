"""Tests for the list reducer and ListController (filter, paginate, loading phase)."""

import pytest

from agency360.schemas.account import AccountStatus
from agency360.services.list_controller import (
    AppendEntity,
    ListState,
    LoadCompleted,
    LoadFailed,
    ReplaceCollection,
    ReplaceEntity,
    SetFilter,
    SetPage,
    account_list,
    highlight_matches,
    matches,
    product_list,
    reduce,
)
from tests.conftest import make_account, make_product


def _fifteen_accounts():
    """Six accounts named Alpha-*, nine named Beta-*."""
    return [
        make_account(n, account_name=f"Alpha-{n}" if n <= 6 else f"Beta-{n}")
        for n in range(1, 16)
    ]


class TestReduce:
    """Test the pure reducer."""

    def test_does_not_mutate_input_state(self):
        state = ListState()
        new = reduce(state, SetFilter("abc"))
        assert state.filter_text == ""
        assert new.filter_text == "abc"
        assert new is not state

    def test_set_filter_keeps_page_index(self):
        state = ListState(page_index=3)
        assert reduce(state, SetFilter("x")).page_index == 3

    def test_set_page_below_one_raises(self):
        with pytest.raises(ValueError):
            reduce(ListState(), SetPage(0))

    def test_load_completed_leaves_loading_phase(self):
        state = reduce(ListState(), LoadCompleted(items=(make_account(1),)))
        assert not state.is_loading
        assert len(state.collection) == 1

    def test_load_failed_leaves_loading_phase_empty(self):
        state = reduce(ListState(), LoadFailed())
        assert not state.is_loading
        assert state.collection == ()

    def test_no_action_returns_to_loading(self):
        state = reduce(ListState(), LoadCompleted(items=()))
        for action in (SetFilter("a"), SetPage(2), ReplaceCollection(items=()), AppendEntity(make_product(1))):
            state = reduce(state, action)
            assert not state.is_loading

    def test_replace_entity_swaps_by_id(self):
        state = ListState(collection=(make_product(1), make_product(2)), is_loading=False)
        renamed = make_product(2, name="Renamed")
        state = reduce(state, ReplaceEntity(renamed))
        assert [p.name for p in state.collection] == ["Product 1", "Renamed"]

    def test_append_entity(self):
        state = reduce(ListState(collection=(make_product(1),)), AppendEntity(make_product(2)))
        assert [p.id for p in state.collection] == ["P1", "P2"]

    def test_unknown_action_raises(self):
        with pytest.raises(TypeError):
            reduce(ListState(), object())


class TestListController:
    """Test filter -> paginate -> render."""

    def test_placeholders_while_loading(self):
        controller = account_list(page_size=10)
        page = controller.visible_page()
        assert controller.is_loading
        assert [a.id for a in page] == [f"skeleton-{i}" for i in range(10)]

    def test_loading_hides_collection_entities(self):
        controller = account_list(page_size=3)
        controller.dispatch(ReplaceCollection(items=_fifteen_accounts()))
        controller.dispatch(AppendEntity(make_account(99)))
        assert controller.is_loading
        assert len(controller.collection) == 16
        page = controller.visible_page()
        assert [a.id for a in page] == ["skeleton-0", "skeleton-1", "skeleton-2"]
        assert not {a.id for a in page} & {a.id for a in controller.collection}

        controller.dispatch(LoadCompleted(items=controller.collection))
        assert [a.id for a in controller.visible_page()] == ["A1", "A2", "A3"]

    def test_filter_then_paginate(self):
        controller = account_list(page_size=10, items=_fifteen_accounts())
        assert controller.page_count() == 2
        controller.set_filter("alpha")
        assert controller.filtered_count() == 6
        assert controller.page_count() == 1
        assert len(controller.visible_page()) == 6

    def test_filter_matches_status(self):
        accounts = [make_account(1), make_account(2, status=AccountStatus.INACTIVE)]
        controller = account_list(items=accounts)
        controller.set_filter("inactive")
        assert [a.id for a in controller.visible_page()] == ["A2"]

    def test_page_beyond_end_renders_empty(self):
        controller = account_list(page_size=10, items=_fifteen_accounts())
        controller.set_page(2)
        assert len(controller.visible_page()) == 5
        controller.set_filter("alpha")
        assert controller.state.page_index == 2
        assert controller.visible_page() == []

    def test_empty_filter_shows_everything(self):
        controller = product_list(page_size=5, items=[make_product(n) for n in range(1, 8)])
        controller.set_filter("")
        assert controller.filtered_count() == 7
        assert controller.page_count() == 2

    def test_empty_collection_has_zero_pages(self):
        controller = product_list(items=[])
        assert controller.page_count() == 0
        assert controller.visible_page() == []

    def test_product_search_fields(self):
        products = [make_product(1, owner="Dana"), make_product(2, position="Security")]
        controller = product_list(items=products)
        controller.set_filter("dana")
        assert [p.id for p in controller.visible_page()] == ["P1"]
        controller.set_filter("SECUR")
        assert [p.id for p in controller.visible_page()] == ["P2"]

    @pytest.mark.parametrize("page_size", [1, 3, 10])
    def test_page_invariants(self, page_size):
        controller = account_list(page_size=page_size, items=_fifteen_accounts())
        controller.set_filter("beta")
        pages = controller.page_count()
        seen = []
        for index in range(1, pages + 1):
            controller.set_page(index)
            page = controller.visible_page()
            assert len(page) <= page_size
            seen.extend(page)
        assert seen == controller.filtered()
        assert all(matches((a.account_name,), "beta") for a in seen)

    def test_get_by_id(self):
        controller = account_list(items=[make_account(1)])
        assert controller.get("A1").account_name == "Account 1"
        assert controller.get("missing") is None

    def test_rejects_zero_page_size(self):
        with pytest.raises(ValueError):
            account_list(page_size=0)


class TestHighlightMatches:
    def test_marks_case_insensitive_occurrences(self):
        assert highlight_matches("Alpha alpha", "ALPHA") == [
            ("Alpha", True),
            (" ", False),
            ("alpha", True),
        ]

    def test_empty_filter_returns_whole_text(self):
        assert highlight_matches("Alpha", "") == [("Alpha", False)]

    def test_filter_is_literal(self):
        assert highlight_matches("a.b", ".") == [("a", False), (".", True), ("b", False)]

    def test_empty_text(self):
        assert highlight_matches("", "x") == []
