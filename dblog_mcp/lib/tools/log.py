"""Log-table MCP tools.

Read paths over the application log table:

- retrieve_log: newest-first rows before a timestamp, optionally capped,
  with each row's category id resolved to a name
- summarize_log: exact row count plus the first and last entries
- search_log: rows inside an inclusive time window, oldest first

The ``LIMIT`` used by retrieve_log is applied to the ordered selection,
so a cap always drops the oldest of the matching rows.
"""

from datetime import datetime, tzinfo
from typing import Any, Dict, List, Optional

from dblog_mcp.lib.formatting import materialize_value
from dblog_mcp.lib.logging_config import get_logger
from dblog_mcp.lib.timestamps import (
    as_utc,
    parse_timestamp,
    resolve_zone,
    to_iso_string,
    to_unix_millis
)
from dblog_mcp.models.config import ToolSettings
from dblog_mcp.models.error_types import ValidationError
from dblog_mcp.models.tool_responses import (
    LogRecord,
    LogEntrySummary,
    RetrieveLogResponse,
    SummarizeLogResponse,
    SearchLogResponse
)
from dblog_mcp.services.connection_provider import (
    ConnectionProvider,
    fetch_all,
    fetch_one,
    session_timezone
)
from dblog_mcp.services.query_utils import require_text, resolve_log_table

logger = get_logger(__name__)

LOG_COLUMNS = (
    "id, comp_type_id, comp_id, comp_uid, created, log_level_id, log_category_id, "
    "log_sub_category, entry, user_def_id, execution_context, log_error_category_id, "
    "log_code, api_context"
)

SUMMARY_COLUMNS = "id, comp_id, created, entry"


def _int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


def _text(value: Any, column: str, max_bytes: int) -> Optional[str]:
    value = materialize_value(value, column, max_bytes)
    return None if value is None else str(value)


def _map_log_record(row: Dict[str, Any], zone: tzinfo, max_bytes: int) -> LogRecord:
    created = row.get('created')
    return LogRecord(
        id=_int(row.get('id')),
        comp_type_id=_int(row.get('comp_type_id')),
        comp_id=_text(row.get('comp_id'), 'comp_id', max_bytes),
        comp_uid=_text(row.get('comp_uid'), 'comp_uid', max_bytes),
        created_iso=to_iso_string(created, zone),
        created_unix_ms=to_unix_millis(created, zone),
        log_level_id=_int(row.get('log_level_id')),
        log_category_id=_int(row.get('log_category_id')),
        log_sub_category=_text(row.get('log_sub_category'), 'log_sub_category', max_bytes),
        entry=_text(row.get('entry'), 'entry', max_bytes),
        user_def_id=_int(row.get('user_def_id')),
        execution_context=_text(row.get('execution_context'), 'execution_context', max_bytes),
        log_error_category_id=_int(row.get('log_error_category_id')),
        log_code=_int(row.get('log_code')),
        api_context=_text(row.get('api_context'), 'api_context', max_bytes)
    )


def _map_summary(row: Optional[Dict[str, Any]], zone: tzinfo, max_bytes: int) -> Optional[LogEntrySummary]:
    if row is None:
        return None
    created = row.get('created')
    return LogEntrySummary(
        id=_int(row.get('id')),
        created_iso=to_iso_string(created, zone),
        created_unix_ms=to_unix_millis(created, zone),
        entry=_text(row.get('entry'), 'entry', max_bytes)
    )


def _session_zone(provider: ConnectionProvider, conn) -> tzinfo:
    return resolve_zone(session_timezone(conn, provider.timezone))


def _check_window(start: datetime, end: datetime, zone: tzinfo) -> None:
    if as_utc(start, zone) > as_utc(end, zone):
        raise ValidationError("Start timestamp must not be after end timestamp", field='start_iso')


def populate_category_names(conn, records: List[LogRecord], category_table: str) -> None:
    """Resolve each record's category id to a name.

    Every distinct id is looked up once per call; ids with no matching
    row resolve to ``None``.
    """
    if not records:
        return

    query = f"SELECT name FROM {category_table} WHERE id = %s"
    cache: Dict[int, Optional[str]] = {}

    for record in records:
        category_id = record.log_category_id
        if category_id is None:
            continue

        if category_id not in cache:
            row = fetch_one(conn, query, (category_id,))
            cache[category_id] = None if row is None else row.get('name')

        record.log_category_name = cache[category_id]

    logger.debug(f"Resolved {len(cache)} distinct log categories")


def retrieve_log(provider: ConnectionProvider,
                 settings: ToolSettings,
                 comp_id: str,
                 before_iso: str,
                 max_records: int) -> RetrieveLogResponse:
    """Retrieve log rows for a component created before a timestamp.

    Args:
        provider: Connection provider
        settings: Tool settings naming the log tables
        comp_id: Component identifier to search
        before_iso: Exclusive upper bound timestamp (ISO-8601)
        max_records: Maximum rows to return; negative returns all matches

    Returns:
        RetrieveLogResponse with rows ordered newest first (id breaks ties)

    Raises:
        ValidationError: If comp_id is blank or the timestamp is malformed
    """
    comp_id = require_text(comp_id, 'comp_id', "comp_id is required.")
    before = parse_timestamp(before_iso)
    log_table = resolve_log_table(settings.log_table)
    category_table = resolve_log_table(settings.log_category_table)

    query = (
        f"SELECT {LOG_COLUMNS} FROM {log_table} "
        "WHERE comp_id = %s AND created < %s "
        "ORDER BY created DESC, id DESC"
    )
    params: tuple = (comp_id, before)
    if max_records >= 0:
        query += " LIMIT %s"
        params += (max_records,)

    with provider.acquire() as conn:
        zone = _session_zone(provider, conn)
        rows = fetch_all(conn, query, params)
        records = [_map_log_record(row, zone, settings.max_lob_bytes) for row in rows]
        populate_category_names(conn, records, category_table)

    logger.info(f"Retrieved {len(records)} log records for comp_id={comp_id}")

    return RetrieveLogResponse(
        comp_id=comp_id,
        before_iso=to_iso_string(before, zone),
        before_unix_ms=to_unix_millis(before, zone),
        max_records=max_records,
        returned_count=len(records),
        records=records
    )


def summarize_log(provider: ConnectionProvider,
                  settings: ToolSettings,
                  comp_id: str) -> SummarizeLogResponse:
    """Count a component's log rows and report the first and last of them.

    Args:
        provider: Connection provider
        settings: Tool settings naming the log table
        comp_id: Component identifier to summarize

    Returns:
        SummarizeLogResponse; both entries are ``None`` when the count is zero

    Raises:
        ValidationError: If comp_id is blank
    """
    comp_id = require_text(comp_id, 'comp_id', "comp_id is required.")
    log_table = resolve_log_table(settings.log_table)

    count_query = f"SELECT COUNT(*) AS total FROM {log_table} WHERE comp_id = %s"
    entry_query = (
        f"SELECT {SUMMARY_COLUMNS} FROM {log_table} WHERE comp_id = %s "
        "ORDER BY created {direction}, id {direction} LIMIT 1"
    )

    first_entry = None
    last_entry = None

    with provider.acquire() as conn:
        zone = _session_zone(provider, conn)
        count_row = fetch_one(conn, count_query, (comp_id,))
        total_entries = int(count_row['total']) if count_row and count_row.get('total') is not None else 0

        if total_entries > 0:
            first_entry = _map_summary(
                fetch_one(conn, entry_query.format(direction='ASC'), (comp_id,)),
                zone, settings.max_lob_bytes
            )
            last_entry = _map_summary(
                fetch_one(conn, entry_query.format(direction='DESC'), (comp_id,)),
                zone, settings.max_lob_bytes
            )

    logger.info(f"Summarized {total_entries} log entries for comp_id={comp_id}")

    return SummarizeLogResponse(
        comp_id=comp_id,
        total_entries=total_entries,
        first_entry=first_entry,
        last_entry=last_entry
    )


def search_log(provider: ConnectionProvider,
               settings: ToolSettings,
               start_iso: str,
               end_iso: str,
               comp_id: Optional[str] = None) -> SearchLogResponse:
    """Find log rows created inside an inclusive time window.

    Args:
        provider: Connection provider
        settings: Tool settings naming the log table
        start_iso: Inclusive lower bound (ISO-8601)
        end_iso: Inclusive upper bound (ISO-8601)
        comp_id: Optional component identifier to narrow the search

    Returns:
        SearchLogResponse with rows ordered oldest first; category names
        are not resolved

    Raises:
        ValidationError: If a bound is malformed or start is after end
    """
    start = parse_timestamp(start_iso)
    end = parse_timestamp(end_iso)
    # A local bound and an offset bound can only be ordered in the session
    # zone, which must be read from the server when none is configured
    mixed = (start.tzinfo is None) != (end.tzinfo is None)
    window_checked = not mixed or bool(provider.timezone)
    if window_checked:
        _check_window(start, end, resolve_zone(provider.timezone))

    if comp_id is not None and not comp_id.strip():
        comp_id = None
    elif comp_id is not None:
        comp_id = comp_id.strip()

    log_table = resolve_log_table(settings.log_table)

    query = f"SELECT {LOG_COLUMNS} FROM {log_table} WHERE created BETWEEN %s AND %s"
    params: tuple = (start, end)
    if comp_id is not None:
        query += " AND comp_id = %s"
        params += (comp_id,)
    query += " ORDER BY created ASC, id ASC"

    with provider.acquire() as conn:
        zone = _session_zone(provider, conn)
        if not window_checked:
            _check_window(start, end, zone)
        rows = fetch_all(conn, query, params)
        records = [_map_log_record(row, zone, settings.max_lob_bytes) for row in rows]

    logger.info(f"Found {len(records)} log records between {start_iso} and {end_iso}")

    return SearchLogResponse(
        comp_id=comp_id,
        start_iso=to_iso_string(start, zone),
        start_unix_ms=to_unix_millis(start, zone),
        end_iso=to_iso_string(end, zone),
        end_unix_ms=to_unix_millis(end, zone),
        returned_count=len(records),
        records=records
    )
