# ABOUTME: Patch-merge engine: rebuilds a table from a base snapshot plus an optional patch.
# ABOUTME: Handles no-op sentinel cells, soft deletes, new rows, and patch-only columns.

import logging
from collections.abc import Iterable, Sequence

from shamela.db.store import Column, Row, TableStore

logger = logging.getLogger(__name__)

# A patch cell holding this value (or NULL) means "keep the base value".
PATCH_NOOP_VALUE = "#"

DELETED_FLAG_COLUMN = "is_deleted"


def is_deleted(row: Row) -> bool:
    """Whether a row carries the soft-delete flag. Rows without the column are live."""
    return str(row.get(DELETED_FLAG_COLUMN)) == "1"


def reconcile_columns(base_columns: Iterable[str], patch_columns: Iterable[str]) -> list[str]:
    """Base column order, followed by patch-only columns in patch order.

    Names are compared case-insensitively, as SQLite does; the first spelling wins.
    """
    columns: list[str] = []
    seen: set[str] = set()
    for name in (*base_columns, *patch_columns):
        if name.casefold() not in seen:
            columns.append(name)
            seen.add(name.casefold())
    return columns


def reconcile_schema(
    base: Sequence[Column], patch: Sequence[Column]
) -> tuple[list[str], list[Column]]:
    """Reconcile two column lists.

    Returns:
        ``(columns, added)`` where ``columns`` is the merged name list and
        ``added`` are the patch columns the target table must gain before
        insert. Added columns without a declared type default to TEXT.
    """
    columns = reconcile_columns((c.name for c in base), (c.name for c in patch))
    base_names = {c.name.casefold() for c in base}
    added: list[Column] = []
    for column in patch:
        if column.name.casefold() not in base_names:
            added.append(Column(column.name, column.type or "TEXT"))
            base_names.add(column.name.casefold())
    return columns, added


def _defers_to_base(value: object) -> bool:
    return value is None or value == PATCH_NOOP_VALUE


def _align_keys(rows: Sequence[Row], columns: Sequence[str]) -> list[Row]:
    """Respell row keys that differ from ``columns`` only by case."""
    canonical = {name.casefold(): name for name in columns}
    return [
        {canonical.get(key.casefold(), key): value for key, value in row.items()} for row in rows
    ]


def merge_row_values(base_row: Row | None, patch_row: Row | None, columns: Sequence[str]) -> Row:
    """Combine one base row and one patch row over ``columns``.

    The patch value wins unless the cell is missing, NULL, or the no-op
    sentinel; then the base value is used, and NULL when neither has it.
    ``id`` is always copied from the row that produced the result.
    """
    merged: Row = {}
    for column in columns:
        if column == "id":
            source = patch_row if patch_row is not None else base_row
            merged["id"] = source.get("id") if source is not None else None
            continue

        if patch_row is not None and column in patch_row:
            value = patch_row[column]
            if not _defers_to_base(value):
                merged[column] = value
                continue

        if base_row is not None and column in base_row:
            merged[column] = base_row[column]
            continue

        merged[column] = None
    return merged


def merge_rows(
    base_rows: Sequence[Row], patch_rows: Sequence[Row], columns: Sequence[str]
) -> list[Row]:
    """Apply ``patch_rows`` on top of ``base_rows``.

    Output order is base order followed by patch-only rows in patch order.
    A patch row flagged deleted removes its base row; a deleted patch row with
    no base counterpart is ignored. Base rows already flagged deleted are
    dropped unless a patch row sets the flag back to live.
    """
    patch_by_id: dict[str, Row] = {str(row.get("id")): row for row in patch_rows}
    unmatched = dict.fromkeys(patch_by_id)

    merged: list[Row] = []
    for base_row in base_rows:
        key = str(base_row.get("id"))
        patch_row = patch_by_id.get(key)
        unmatched.pop(key, None)

        if patch_row is not None and is_deleted(patch_row):
            continue
        row = merge_row_values(base_row, patch_row, columns)
        # A no-op or NULL patch flag leaves the base deletion in force.
        if is_deleted(row) or (patch_row is None and is_deleted(base_row)):
            continue
        merged.append(row)

    for key in unmatched:
        patch_row = patch_by_id[key]
        if is_deleted(patch_row):
            continue
        merged.append(merge_row_values(None, patch_row, columns))

    return merged


def copy_and_patch_table(
    target: TableStore,
    source: TableStore,
    patch: TableStore | None,
    table: str,
) -> int | None:
    """Rebuild ``table`` in ``target`` from ``source`` plus an optional ``patch``.

    The target table is recreated with the base columns, extended with any
    columns only the patch knows about, then filled with the merged rows.
    A patch store that lacks ``table`` contributes nothing.

    Returns:
        Number of rows written, or None when ``source`` has no such table
        (the caller carries on with its other tables).
    """
    if not source.has_table(table):
        logger.warning("%s table missing in source database", table)
        return None

    base_columns = source.columns(table)
    if not base_columns:
        logger.warning("%s table definition missing in source database", table)
        return None

    patch_has_table = patch is not None and patch.has_table(table)
    patch_columns = patch.columns(table) if patch_has_table else []

    columns, added = reconcile_schema(base_columns, patch_columns)

    target.create_table(table, base_columns)
    for column in added:
        logger.debug("Adding patch column %s.%s %s", table, column.name, column.type)
        target.add_column(table, column)

    base_rows = source.read_rows(table)
    patch_rows = _align_keys(patch.read_rows(table), columns) if patch_has_table else []
    merged = merge_rows(base_rows, patch_rows, columns)

    target.insert_rows(table, columns, merged)
    logger.debug(
        "Merged %s: %d base row(s), %d patch row(s) -> %d row(s)",
        table,
        len(base_rows),
        len(patch_rows),
        len(merged),
    )
    return len(merged)
