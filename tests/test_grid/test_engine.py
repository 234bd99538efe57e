"""
Tests for the grid engine.

Covers filtering, pagination, configuration validation, loading deferral,
selection and row activation. Records are plain dicts unless a test is
specifically about attribute-style records.
"""

from __future__ import annotations

import logging
import math
from types import SimpleNamespace

import pytest

from kaos_console.grid import (
    DEFAULT_EMPTY_MESSAGE,
    DEFAULT_PAGE_SIZE,
    ColumnDescriptor,
    ConfigurationError,
    GridEngine,
    GridOptions,
)

# =============================================================================
# FIXTURES
# =============================================================================

COLUMNS = (
    ColumnDescriptor("username", "Username"),
    ColumnDescriptor("id", "ID"),
    ColumnDescriptor("email", "Email"),
)

SEARCH_FIELDS = frozenset({"username", "id", "email"})


def make_players(count: int, admin_indexes: tuple[int, ...] = ()) -> list[dict]:
    """Build ``count`` player records; ``admin_indexes`` get admin usernames."""
    players = []
    for index in range(1, count + 1):
        name = f"admin_{index}" if index in admin_indexes else f"player_{index}"
        players.append({"id": f"p-{index:04d}", "username": name, "email": None})
    return players


def make_engine(records, **option_overrides) -> GridEngine:
    options = {"searchable": True, "search_fields": SEARCH_FIELDS, "page_size": 10}
    options.update(option_overrides)
    return GridEngine(records, COLUMNS, "id", GridOptions(**options))


# =============================================================================
# OPTIONS VALIDATION
# =============================================================================


class TestGridOptions:
    """Tests for GridOptions validation."""

    def test_defaults(self):
        options = GridOptions()

        assert options.searchable is False
        assert options.search_fields == frozenset()
        assert options.pagination is True
        assert options.page_size == DEFAULT_PAGE_SIZE
        assert options.empty_message == DEFAULT_EMPTY_MESSAGE
        assert options.loading is False

    def test_searchable_without_fields_raises(self):
        with pytest.raises(ConfigurationError) as exc_info:
            GridOptions(searchable=True, search_fields=frozenset())

        assert exc_info.value.option == "search_fields"

    @pytest.mark.parametrize("page_size", [0, -5, 2.5, True, "10"])
    def test_invalid_page_size_raises(self, page_size):
        with pytest.raises(ConfigurationError) as exc_info:
            GridOptions(pagination=True, page_size=page_size)

        assert exc_info.value.option == "page_size"

    def test_page_size_ignored_without_pagination(self):
        options = GridOptions(pagination=False, page_size=0)

        assert options.pagination is False

    def test_search_fields_string_is_one_field(self):
        options = GridOptions(searchable=True, search_fields="username")

        assert options.search_fields == frozenset({"username"})

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            GridOptions(searchable=True)

    def test_engine_rejects_invalid_options_before_render(self):
        rendered = []

        with pytest.raises(ConfigurationError):
            GridEngine(
                make_players(3),
                (ColumnDescriptor("id", "ID", render=lambda r: rendered.append(r)),),
                "id",
                GridOptions(searchable=True, search_fields=frozenset()),
            )

        assert rendered == []

    def test_engine_rejects_empty_key_field(self):
        with pytest.raises(ConfigurationError) as exc_info:
            GridEngine([], COLUMNS, "")

        assert exc_info.value.option == "key_field"


# =============================================================================
# FILTERING
# =============================================================================


class TestFiltering:
    """Tests for the free-text filter."""

    def test_empty_query_is_identity(self):
        players = make_players(7)
        engine = make_engine(players)

        engine.set_search_query("")

        assert engine.filtered_records == players

    def test_whitespace_query_is_no_filter(self):
        players = make_players(7)
        engine = make_engine(players)

        engine.set_search_query("   ")

        assert engine.filtered_records == players

    def test_case_insensitive_substring(self):
        engine = make_engine(make_players(5, admin_indexes=(2, 4)))

        engine.set_search_query("ADMIN")

        assert [p["username"] for p in engine.filtered_records] == ["admin_2", "admin_4"]

    def test_or_across_fields(self):
        players = [
            {"id": "x-1", "username": "alice", "email": "one@example.com"},
            {"id": "x-2", "username": "bob", "email": "alice@example.com"},
            {"id": "alice-3", "username": "carol", "email": None},
            {"id": "x-4", "username": "dave", "email": "dave@example.com"},
        ]
        engine = make_engine(players)

        engine.set_search_query("alice")

        assert [p["id"] for p in engine.filtered_records] == ["x-1", "x-2", "alice-3"]

    def test_partition_property(self):
        players = make_players(30, admin_indexes=(3, 11, 19))
        players[5]["email"] = "ops+admin@example.com"
        engine = make_engine(players)

        engine.set_search_query("Admin")

        kept = engine.filtered_records
        dropped = [p for p in players if p not in kept]

        def matches(record):
            return any(
                record.get(name) is not None and "admin" in str(record[name]).casefold()
                for name in SEARCH_FIELDS
            )

        assert all(matches(p) for p in kept)
        assert not any(matches(p) for p in dropped)
        assert len(kept) == 4

    def test_none_never_matches(self):
        engine = make_engine([{"id": "1", "username": "x", "email": None}])

        engine.set_search_query("none")

        assert engine.filtered_records == []

    def test_non_string_values_match_on_string_form(self):
        engine = GridEngine(
            [{"id": 101, "level": 42}, {"id": 102, "level": 7}],
            (ColumnDescriptor("level", "Level"),),
            "id",
            GridOptions(searchable=True, search_fields=frozenset({"level"})),
        )

        engine.set_search_query("42")

        assert [r["id"] for r in engine.filtered_records] == [101]

    def test_missing_search_field_is_skipped(self):
        engine = GridEngine(
            [{"id": "1", "username": "zed"}],
            COLUMNS,
            "id",
            GridOptions(searchable=True, search_fields=frozenset({"nickname", "username"})),
        )

        engine.set_search_query("zed")

        assert engine.filtered_count == 1

    def test_query_ignored_when_not_searchable(self):
        players = make_players(4)
        engine = GridEngine(players, COLUMNS, "id", GridOptions(searchable=False))

        engine.set_search_query("nothing matches this")

        assert engine.search_query == "nothing matches this"
        assert engine.filtered_records == players

    def test_set_search_query_is_idempotent(self):
        engine = make_engine(make_players(25, admin_indexes=(1, 12, 24)))

        engine.set_search_query("admin")
        first = (engine.filtered_records, engine.get_visible_rows(), engine.current_page)
        engine.set_search_query("admin")
        second = (engine.filtered_records, engine.get_visible_rows(), engine.current_page)

        assert first == second

    def test_filter_preserves_input_order(self):
        players = make_players(12, admin_indexes=(9, 2, 5))
        engine = make_engine(players)

        engine.set_search_query("admin")

        assert [p["id"] for p in engine.filtered_records] == ["p-0002", "p-0005", "p-0009"]


# =============================================================================
# PAGINATION
# =============================================================================


class TestPagination:
    """Tests for page slicing and clamping."""

    def test_players_scenario(self):
        """25 players, page size 10, then a query matching three usernames."""
        players = make_players(25, admin_indexes=(4, 13, 22))
        engine = make_engine(players)

        assert engine.total_pages == 3
        assert engine.get_visible_rows() == players[:10]

        engine.set_page(3)
        engine.set_search_query("admin")

        assert engine.filtered_count == 3
        assert engine.total_pages == 1
        assert engine.current_page == 1
        assert [p["username"] for p in engine.get_visible_rows()] == [
            "admin_4",
            "admin_13",
            "admin_22",
        ]

    def test_set_page_clamps_high(self):
        players = make_players(12)
        engine = make_engine(players)

        engine.set_page(999)

        assert engine.current_page == 2
        assert engine.get_visible_rows() == players[10:12]

    def test_set_page_logs_clamped_request(self, caplog):
        engine = make_engine(make_players(12))

        with caplog.at_level(logging.DEBUG, logger="kaos_console.grid.engine"):
            engine.set_page(2)
            engine.set_page(999)

        messages = [record.getMessage() for record in caplog.records]
        assert messages == ["Page 999 out of range, showing page 2"]

    @pytest.mark.parametrize("page", [0, -3, "bogus", None])
    def test_set_page_clamps_low_and_invalid(self, page):
        engine = make_engine(make_players(30))

        engine.set_page(2)
        engine.set_page(page)

        assert engine.current_page == 1

    @pytest.mark.parametrize("count,page_size", [(0, 10), (1, 10), (10, 10), (11, 10), (25, 7)])
    def test_pages_cover_filtered_collection(self, count, page_size):
        players = make_players(count)
        engine = make_engine(players, page_size=page_size)

        assert engine.total_pages == max(1, math.ceil(count / page_size))

        seen = []
        for page in range(1, engine.total_pages + 1):
            engine.set_page(page)
            seen.extend(engine.get_visible_rows())

        assert seen == players

    def test_query_change_resets_page_even_when_still_valid(self):
        players = make_players(40)
        engine = make_engine(players)

        engine.set_page(3)
        engine.set_search_query("player")

        assert engine.filtered_count == 40
        assert engine.current_page == 1

    def test_empty_collection_has_one_page(self):
        engine = make_engine([])

        assert engine.total_pages == 1
        assert engine.current_page == 1
        assert engine.get_visible_rows() == []

    def test_pagination_off_shows_everything(self):
        players = make_players(45)
        engine = GridEngine(players, COLUMNS, "id", GridOptions(pagination=False))

        engine.set_page(4)

        assert engine.total_pages == 1
        assert engine.current_page == 1
        assert engine.get_visible_rows() == players

    def test_next_and_previous_page(self):
        engine = make_engine(make_players(25))

        engine.next_page()
        engine.next_page()
        engine.next_page()
        assert engine.current_page == 3

        engine.previous_page()
        assert engine.current_page == 2

    def test_set_records_keeps_query_and_clamps_page(self):
        engine = make_engine(make_players(35))
        engine.set_search_query("player")
        engine.set_page(4)

        engine.set_records(make_players(15))

        assert engine.search_query == "player"
        assert engine.current_page == 2
        assert engine.total_count == 15

    def test_set_records_forgets_old_collection(self):
        engine = make_engine(make_players(5))

        engine.set_records([])

        assert engine.total_count == 0
        assert engine.filtered_records == []

    def test_configure_preserves_query_and_page(self):
        engine = make_engine(make_players(50))
        engine.set_search_query("player")
        engine.set_page(4)

        engine.configure(
            make_players(50),
            COLUMNS,
            "id",
            GridOptions(searchable=True, search_fields=SEARCH_FIELDS, page_size=20),
        )

        assert engine.search_query == "player"
        assert engine.current_page == 3
        assert engine.page_size == 20


# =============================================================================
# LOADING
# =============================================================================


class TestLoading:
    """Tests for the loading state."""

    def test_loading_defers_recompute(self):
        engine = make_engine(make_players(5))
        engine.set_loading(True)

        engine.set_records(make_players(30))

        assert engine.filtered_count == 5
        assert engine.total_count == 30

        engine.set_loading(False)

        assert engine.filtered_count == 30

    def test_loading_snapshot_hides_rows(self):
        engine = make_engine(make_players(5), loading=True, loading_message="Loading players...")

        view = engine.snapshot()

        assert view.loading is True
        assert view.rows == ()
        assert view.message == "Loading players..."

    def test_starting_in_loading_state_with_records(self):
        engine = make_engine(make_players(5), loading=True)

        assert engine.filtered_count == 0

        engine.set_loading(False)

        assert engine.filtered_count == 5


# =============================================================================
# RENDERING & SNAPSHOT
# =============================================================================


class TestRendering:
    """Tests for cell rendering and the presentation snapshot."""

    def test_render_row_in_column_order(self):
        engine = make_engine([])
        record = {"id": "p-1", "username": "alice", "email": "a@example.com"}

        assert engine.render_row(record) == ["alice", "p-1", "a@example.com"]

    def test_missing_field_renders_empty(self):
        engine = make_engine([])

        assert engine.render_row({"id": "p-1"}) == ["", "p-1", ""]

    def test_render_function_combines_fields(self):
        column = ColumnDescriptor("record", "W/L", render=lambda r: f"{r['wins']}/{r['losses']}")
        engine = GridEngine([], (column,), "id")

        assert engine.render_cell({"id": "1", "wins": 3, "losses": 1}, column) == "3/1"

    def test_attribute_records(self):
        records = [SimpleNamespace(id=1, username="alice", email="a@example.com")]
        engine = make_engine(records)

        engine.set_search_query("ALI")

        assert engine.filtered_records == records
        assert engine.row_key(records[0]) == "1"

    def test_custom_field_getter(self):
        records = [{"a": "x", "b": "y"}, {"a": "x", "b": "z"}]
        engine = GridEngine(
            records,
            (ColumnDescriptor("composite", "Key"),),
            "composite",
            GridOptions(searchable=True, search_fields=frozenset({"composite"})),
            field_getter=lambda record, name: (
                f"{record['a']}:{record['b']}" if name == "composite" else record.get(name)
            ),
        )

        engine.set_search_query("x:z")

        assert engine.filtered_records == [records[1]]
        assert engine.render_row(records[0]) == ["x:y"]

    def test_empty_message(self):
        engine = make_engine(make_players(3), empty_message="No players found")

        engine.set_search_query("zzz")
        view = engine.snapshot()

        assert view.rows == ()
        assert view.message == "No players found"
        assert view.filtered_count == 0
        assert view.total_count == 3

    def test_snapshot_counts_and_pager_flags(self):
        engine = make_engine(make_players(25))
        engine.set_page(2)

        view = engine.snapshot()

        assert view.message is None
        assert len(view.rows) == 10
        assert view.current_page == 2
        assert view.total_pages == 3
        assert view.has_previous is True
        assert view.has_next is True


# =============================================================================
# SELECTION & ACTIVATION
# =============================================================================


class TestSelection:
    """Tests for selection highlighting and row activation."""

    def test_selected_row_on_visible_page(self):
        engine = make_engine(make_players(25))

        assert engine.snapshot("p-0003").selected_key == "p-0003"

    def test_selected_row_off_page_highlights_nothing(self):
        engine = make_engine(make_players(25))

        view = engine.snapshot("p-0015")

        assert view.selected_key is None
        assert not any(engine.is_selected(record, "p-0015") for record in view.rows)

    def test_selection_compares_as_strings(self):
        engine = GridEngine([{"id": 7}], COLUMNS, "id")

        assert engine.is_selected({"id": 7}, "7") is True
        assert engine.is_selected({"id": 7}, None) is False

    def test_activate_passes_exact_record_once(self):
        players = make_players(3)
        calls = []
        engine = GridEngine(players, COLUMNS, "id", on_row_activate=calls.append)

        engine.activate(players[1])

        assert len(calls) == 1
        assert calls[0] is players[1]

    def test_activate_does_not_change_state(self):
        players = make_players(25)
        engine = make_engine(players)
        engine.set_page(2)

        engine.activate(players[12])

        assert engine.current_page == 2
        assert engine.filtered_count == 25

    def test_activate_key_resolves_visible_record(self):
        players = make_players(25)
        calls = []
        engine = GridEngine(
            players, COLUMNS, "id", GridOptions(page_size=10), on_row_activate=calls.append
        )

        assert engine.activate_key("p-0004") is players[3]
        assert engine.activate_key("p-0020") is None
        assert calls == [players[3]]

    def test_activate_without_callback_is_noop(self):
        players = make_players(2)
        engine = GridEngine(players, COLUMNS, "id")

        engine.activate(players[0])
