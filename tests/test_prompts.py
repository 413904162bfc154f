"""Tests for prompt helpers."""

import pytest

from gwt import prompts
from gwt.exceptions import PromptCancelledError
from gwt.prompts import select, select_many, select_with_fuzzy_search

BRANCH_OPTIONS = [
    ("main", "local:main"),
    ("feature/add-user", "local:feature/add-user"),
    ("feature/fix-bug", "local:feature/fix-bug"),
    ("feature/add-user", "remote:origin/feature/add-user"),
]


@pytest.fixture
def shown(monkeypatch: pytest.MonkeyPatch) -> list[list[tuple[str, str]]]:
    """Capture the options passed to the arrow selector, which picks the first."""
    calls: list[list[tuple[str, str]]] = []

    def fake_arrow_select(items, title="", default_index=0):
        calls.append(items)
        return items[0][1]

    monkeypatch.setattr(prompts, "arrow_select", fake_arrow_select)
    return calls


def filter_with(monkeypatch: pytest.MonkeyPatch, query: str) -> None:
    monkeypatch.setattr(prompts.Prompt, "ask", classmethod(lambda cls, *args, **kwargs: query))


def test_select_cancelled(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(prompts, "arrow_select", lambda *args, **kwargs: None)

    with pytest.raises(PromptCancelledError):
        select("Pick", [("a", "a")])


def test_select_many_cancelled(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(prompts, "checkbox_select", lambda *args, **kwargs: None)

    with pytest.raises(PromptCancelledError):
        select_many("Pick", [("a", "a")])


def test_fuzzy_select_empty_filter_shows_all(monkeypatch, shown) -> None:
    filter_with(monkeypatch, "")

    select_with_fuzzy_search("Branch:", BRANCH_OPTIONS)

    assert shown == [BRANCH_OPTIONS]


def test_fuzzy_select_filters_by_label(monkeypatch, shown) -> None:
    filter_with(monkeypatch, "add")

    value = select_with_fuzzy_search("Branch:", BRANCH_OPTIONS)

    assert value == "local:feature/add-user"
    assert shown == [[BRANCH_OPTIONS[1], BRANCH_OPTIONS[3]]]


def test_fuzzy_select_auto_selects_single_match(monkeypatch, shown) -> None:
    filter_with(monkeypatch, "fix")

    assert select_with_fuzzy_search("Branch:", BRANCH_OPTIONS) == "local:feature/fix-bug"
    assert shown == []


def test_fuzzy_select_pinned_options_stay_first(monkeypatch, shown) -> None:
    filter_with(monkeypatch, "fix")
    pinned = [("Create new branch...", "__CREATE_NEW__")]

    value = select_with_fuzzy_search("Branch:", BRANCH_OPTIONS, pinned=pinned)

    assert value == "__CREATE_NEW__"
    assert shown == [pinned + [BRANCH_OPTIONS[2]]]


def test_fuzzy_select_no_match_shows_all(monkeypatch, shown) -> None:
    filter_with(monkeypatch, "zzz")

    select_with_fuzzy_search("Branch:", BRANCH_OPTIONS)

    assert shown == [BRANCH_OPTIONS]
