"""
Grid engine: searchable, paginated presentation of an in-memory collection.

The engine is the shared core behind every list view in the console
(players, storage collections, storage objects). It knows nothing about the
shape of the records it presents. Field access is always mediated by a field
getter and by the render functions on the column descriptors, so the same
engine serves dicts from the REST API and attribute-style objects alike.

Derived state (filtered collection, clamped page cursor) is recomputed
synchronously from scratch whenever an input changes. Nothing here performs
I/O or schedules work; host widgets call the transition methods directly from
their event handlers.

Example:
    engine = GridEngine(
        players,
        columns=[ColumnDescriptor("username", "Username")],
        key_field="id",
        options=GridOptions(searchable=True, search_fields=frozenset({"username"})),
        on_row_activate=open_detail,
    )
    engine.set_search_query("admin")
    rows = engine.get_visible_rows()
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic

from kaos_console.grid.columns import ColumnDescriptor, FieldGetter, RecordT, get_field, stringify
from kaos_console.grid.errors import ConfigurationError

logger = logging.getLogger(__name__)

# =============================================================================
# DEFAULTS
# =============================================================================

DEFAULT_PAGE_SIZE = 20
DEFAULT_EMPTY_MESSAGE = "No records"
DEFAULT_LOADING_MESSAGE = "Loading..."


# =============================================================================
# OPTIONS
# =============================================================================


@dataclass(frozen=True)
class GridOptions:
    """
    Immutable presentation options for a grid session.

    Attributes:
        searchable: Enable the free-text filter. When False the full
                    collection is always the filtered collection.
        search_fields: Field names matched by the filter (OR semantics).
                       Must be non-empty when ``searchable`` is True.
        pagination: Split the filtered collection into pages. When False the
                    whole filtered collection is a single page.
        page_size: Rows per page; must be a positive integer when
                   ``pagination`` is True.
        empty_message: Shown verbatim when the filtered collection is empty.
        loading: Start in the loading state.
        loading_message: Text shown in place of rows while loading.

    Raises:
        ConfigurationError: On construction, for an invalid combination.
    """

    searchable: bool = False
    search_fields: frozenset[str] = field(default_factory=frozenset)
    pagination: bool = True
    page_size: int = DEFAULT_PAGE_SIZE
    empty_message: str = DEFAULT_EMPTY_MESSAGE
    loading: bool = False
    loading_message: str = DEFAULT_LOADING_MESSAGE

    def __post_init__(self) -> None:
        # A bare string would otherwise be split into single characters.
        fields = self.search_fields
        if isinstance(fields, str):
            fields = (fields,)
        object.__setattr__(self, "search_fields", frozenset(fields))
        self.validate()

    def validate(self) -> None:
        """
        Check the option combination.

        Raises:
            ConfigurationError: If ``searchable`` is set without search
                fields, or ``pagination`` is set with a non-positive page size.
        """
        if self.searchable and not self.search_fields:
            raise ConfigurationError(
                "searchable grid requires at least one search field",
                option="search_fields",
            )

        if self.pagination:
            size = self.page_size
            if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
                raise ConfigurationError(
                    f"page_size must be a positive integer, got {size!r}",
                    option="page_size",
                )


# =============================================================================
# PRESENTATION SNAPSHOT
# =============================================================================


@dataclass(frozen=True)
class GridView(Generic[RecordT]):
    """
    Immutable view of the engine state for a host widget.

    Attributes:
        rows: Records on the current page (empty while loading).
        current_page: 1-indexed page number.
        total_pages: Number of pages, never less than 1.
        filtered_count: Size of the filtered collection.
        total_count: Size of the input collection.
        search_query: The active query as typed by the user.
        loading: True while the loading indicator replaces the rows.
        message: Loading or empty message, None when rows are shown.
        selected_key: Key of the highlighted row, None if not on this page.
    """

    rows: tuple[RecordT, ...]
    current_page: int
    total_pages: int
    filtered_count: int
    total_count: int
    search_query: str
    loading: bool
    message: str | None
    selected_key: str | None = None

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages


# =============================================================================
# ENGINE
# =============================================================================


class GridEngine(Generic[RecordT]):
    """
    Filtering, pagination, row identity and activation for one grid.

    Args:
        records: The full collection supplied by the caller.
        columns: Ordered column schema; order is display order.
        key_field: Field holding each record's unique identifier.
        options: Presentation options (defaults to ``GridOptions()``).
        on_row_activate: Callback invoked with the activated record.
        field_getter: ``(record, name) -> value`` accessor. Defaults to
                      mapping lookup with an attribute fallback.

    Raises:
        ConfigurationError: If the options or key field are invalid.
    """

    def __init__(
        self,
        records: Iterable[RecordT],
        columns: Sequence[ColumnDescriptor[RecordT]],
        key_field: str,
        options: GridOptions | None = None,
        *,
        on_row_activate: Callable[[RecordT], Any] | None = None,
        field_getter: FieldGetter | None = None,
    ) -> None:
        self._field_getter: FieldGetter = field_getter or get_field
        self.on_row_activate = on_row_activate
        self._records: list[RecordT] = []
        self._filtered: list[RecordT] = []
        self._query = ""
        self._current_page = 1
        self._loading = False
        self.configure(records, columns, key_field, options)

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def configure(
        self,
        records: Iterable[RecordT],
        columns: Sequence[ColumnDescriptor[RecordT]],
        key_field: str,
        options: GridOptions | None = None,
    ) -> None:
        """
        Establish a rendering session.

        The current search query and page survive reconfiguration; the page
        is clamped against the new filtered collection.

        Raises:
            ConfigurationError: If the options or key field are invalid.
        """
        options = options if options is not None else GridOptions()
        options.validate()
        if not key_field:
            raise ConfigurationError("key_field is required", option="key_field")

        self._columns: tuple[ColumnDescriptor[RecordT], ...] = tuple(columns)
        self._key_field = key_field
        self._options = options
        self._records = list(records)
        self._loading = options.loading
        self._recompute()

    def set_records(self, records: Iterable[RecordT]) -> None:
        """Swap in a fresh collection, keeping the query and page cursor."""
        self._records = list(records)
        self._recompute()

    def set_loading(self, loading: bool) -> None:
        """Enter or leave the loading state; leaving it recomputes."""
        self._loading = bool(loading)
        if not self._loading:
            self._recompute()

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def set_search_query(self, query: str) -> None:
        """Apply a free-text query and return to the first page."""
        self._query = query or ""
        self._current_page = 1
        self._recompute()

    def set_page(self, page: int) -> None:
        """Move to a page, clamping out-of-range requests."""
        try:
            requested = int(page)
        except (TypeError, ValueError):
            requested = 1
        self._current_page = self._clamp(requested)
        if self._current_page != requested:
            logger.debug("Page %s out of range, showing page %s", requested, self._current_page)

    def next_page(self) -> None:
        self.set_page(self._current_page + 1)

    def previous_page(self) -> None:
        self.set_page(self._current_page - 1)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def columns(self) -> tuple[ColumnDescriptor[RecordT], ...]:
        return self._columns

    @property
    def key_field(self) -> str:
        return self._key_field

    @property
    def options(self) -> GridOptions:
        return self._options

    @property
    def search_query(self) -> str:
        return self._query

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def page_size(self) -> int:
        return self._options.page_size

    @property
    def current_page(self) -> int:
        return self._current_page

    @property
    def total_pages(self) -> int:
        if not self._options.pagination:
            return 1
        return max(1, math.ceil(len(self._filtered) / self._options.page_size))

    @property
    def filtered_records(self) -> list[RecordT]:
        return list(self._filtered)

    @property
    def filtered_count(self) -> int:
        return len(self._filtered)

    @property
    def total_count(self) -> int:
        return len(self._records)

    def get_visible_rows(self) -> list[RecordT]:
        """Return the current page slice in input order."""
        if not self._options.pagination:
            return list(self._filtered)
        size = self._options.page_size
        start = (self._current_page - 1) * size
        return self._filtered[start : start + size]

    def get_field(self, record: RecordT, name: str) -> Any:
        return self._field_getter(record, name)

    def row_key(self, record: RecordT) -> str:
        """Return the record's identity as a string."""
        return stringify(self._field_getter(record, self._key_field))

    def render_cell(self, record: RecordT, column: ColumnDescriptor[RecordT]) -> Any:
        """Render one cell, falling back to the raw field named by the key."""
        if column.render is not None:
            return column.render(record)
        return stringify(self._field_getter(record, column.key))

    def render_row(self, record: RecordT) -> list[Any]:
        return [self.render_cell(record, column) for column in self._columns]

    def is_selected(self, record: RecordT, selected_id: Any) -> bool:
        if selected_id is None:
            return False
        return self.row_key(record) == stringify(selected_id)

    def find_visible(self, key: Any) -> RecordT | None:
        """Resolve a row key to the exact record on the visible page."""
        wanted = stringify(key)
        return next(
            (record for record in self.get_visible_rows() if self.row_key(record) == wanted),
            None,
        )

    def snapshot(self, selected_id: Any = None) -> GridView[RecordT]:
        """Build the presentation state for the host."""
        rows: tuple[RecordT, ...] = ()
        selected_key: str | None = None
        if self._loading:
            message: str | None = self._options.loading_message
        elif not self._filtered:
            message = self._options.empty_message
        else:
            message = None
            rows = tuple(self.get_visible_rows())
            selected_key = next(
                (self.row_key(record) for record in rows if self.is_selected(record, selected_id)),
                None,
            )

        return GridView(
            rows=rows,
            current_page=self._current_page,
            total_pages=self.total_pages,
            filtered_count=len(self._filtered),
            total_count=len(self._records),
            search_query=self._query,
            loading=self._loading,
            message=message,
            selected_key=selected_key,
        )

    # -------------------------------------------------------------------------
    # Activation
    # -------------------------------------------------------------------------

    def activate(self, record: RecordT) -> None:
        """Forward a row activation to the caller's callback."""
        if self.on_row_activate is not None:
            self.on_row_activate(record)

    def activate_key(self, key: Any) -> RecordT | None:
        """Activate the visible row with the given key, if any."""
        record = self.find_visible(key)
        if record is None:
            logger.debug("Ignoring activation for row %r not on the visible page", key)
            return None
        self.activate(record)
        return record

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _recompute(self) -> None:
        """Rebuild the filtered collection unless a load is in progress."""
        if self._loading:
            return

        self._filtered = self._filter(self._records)
        self._current_page = self._clamp(self._current_page)

    def _filter(self, records: list[RecordT]) -> list[RecordT]:
        if not self._options.searchable:
            return list(records)

        needle = self._query.strip().casefold()
        if not needle:
            return list(records)

        fields = self._options.search_fields
        return [record for record in records if self._matches(record, needle, fields)]

    def _matches(self, record: RecordT, needle: str, fields: frozenset[str]) -> bool:
        for name in fields:
            value = self._field_getter(record, name)
            if value is None:
                continue
            if needle in str(value).casefold():
                return True
        return False

    def _clamp(self, page: int) -> int:
        return min(max(page, 1), self.total_pages)
