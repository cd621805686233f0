"""Contract tests for retrieve_log, summarize_log and search_log.

These tests verify:
- retrieve_log orders newest first, caps with LIMIT, and resolves category names once per id
- summarize_log reports nulls without extra queries when nothing matches
- search_log validates its window before opening a connection, except for
  mixed local and offset bounds, which need the session time zone
"""

import json
import pytest
from datetime import datetime

from dblog_mcp.lib.tools.log import retrieve_log, summarize_log, search_log
from dblog_mcp.models.config import ToolSettings
from dblog_mcp.models.error_types import ValidationError


def log_row(row_id, created, category_id=None, entry="entry", comp_id="C1"):
    return {
        'id': row_id,
        'comp_type_id': 7,
        'comp_id': comp_id,
        'comp_uid': 'uid-1',
        'created': created,
        'log_level_id': 2,
        'log_category_id': category_id,
        'log_sub_category': 'sub',
        'entry': entry,
        'user_def_id': None,
        'execution_context': 'ctx',
        'log_error_category_id': None,
        'log_code': 100,
        'api_context': None
    }


class TestRetrieveLogContract:
    """Contract tests for retrieve_log tool."""

    def test_retrieve_log_records(self, make_provider, tool_settings):
        """Test records, echo fields and category enrichment."""
        provider = make_provider(
            [
                log_row(3, datetime(2025, 1, 1, 0, 0, 2), category_id=5, entry="third"),
                log_row(2, datetime(2025, 1, 1, 0, 0, 1), category_id=5, entry="second"),
            ],
            [{'name': 'AUTH'}]
        )

        data = json.loads(retrieve_log(provider, tool_settings, 'C1', '2025-01-02T00:00:00Z', 2).to_json())

        assert data['compId'] == 'C1'
        assert data['beforeIso'] == '2025-01-02T00:00:00Z'
        assert data['beforeUnixMs'] == 1735776000000
        assert data['maxRecords'] == 2
        assert data['returnedCount'] == 2
        assert [r['id'] for r in data['records']] == [3, 2]
        first = data['records'][0]
        assert first['createdIso'] == '2025-01-01T00:00:02Z'
        assert first['createdUnixMs'] == 1735689602000
        assert first['logCategoryName'] == 'AUTH'
        assert first['userDefId'] is None
        assert first['apiContext'] is None

    def test_category_looked_up_once_per_id(self, make_provider, tool_settings):
        """Test repeated category ids share one lookup and unknown ids stay null."""
        provider = make_provider(
            [
                log_row(3, datetime(2025, 1, 1, 0, 0, 3), category_id=5),
                log_row(2, datetime(2025, 1, 1, 0, 0, 2), category_id=5),
                log_row(1, datetime(2025, 1, 1, 0, 0, 1), category_id=9),
            ],
            [{'name': 'AUTH'}],
            []
        )

        response = retrieve_log(provider, tool_settings, 'C1', '2025-01-02T00:00:00Z', -1)

        category_queries = [q for q, _ in provider.connection.executed if 'SELECT name FROM' in q]
        assert len(category_queries) == 2
        assert [r.log_category_name for r in response.records] == ['AUTH', 'AUTH', None]

    def test_null_category_id_not_looked_up(self, make_provider, tool_settings):
        """Test rows without a category id need no lookup."""
        provider = make_provider([log_row(1, datetime(2025, 1, 1), category_id=None)])

        response = retrieve_log(provider, tool_settings, 'C1', '2025-01-02T00:00:00Z', 10)

        assert len(provider.connection.executed) == 1
        assert response.records[0].log_category_name is None

    def test_limit_applied_after_ordering(self, make_provider, tool_settings):
        """Test the cap is a LIMIT on the ordered query."""
        provider = make_provider([])

        retrieve_log(provider, tool_settings, ' C1 ', '2025-01-02T00:00:00Z', 5)

        query, params = provider.connection.executed[0]
        assert query.index("ORDER BY created DESC, id DESC") < query.index("LIMIT %s")
        assert params[0] == 'C1'
        assert params[2] == 5

    def test_negative_max_returns_all(self, make_provider, tool_settings):
        """Test a negative cap adds no LIMIT."""
        provider = make_provider([])

        data = json.loads(retrieve_log(provider, tool_settings, 'C1', '2025-01-02T00:00:00Z', -1).to_json())

        query, params = provider.connection.executed[0]
        assert "LIMIT" not in query
        assert len(params) == 2
        assert data['maxRecords'] == -1
        assert data['returnedCount'] == 0

    def test_zero_max_returns_none(self, make_provider, tool_settings):
        """Test a zero cap is passed through as LIMIT 0."""
        provider = make_provider([])

        retrieve_log(provider, tool_settings, 'C1', '2025-01-02T00:00:00Z', 0)

        assert provider.connection.executed[0][1][2] == 0

    def test_configured_table_names(self, make_provider):
        """Test configured tables are used, quoted."""
        settings = ToolSettings(log_table='app.event_log', log_category_table='app.event_category')
        provider = make_provider([log_row(1, datetime(2025, 1, 1), category_id=1)], [{'name': 'X'}])

        retrieve_log(provider, settings, 'C1', '2025-01-02T00:00:00Z', 1)

        assert 'FROM "app"."event_log"' in provider.connection.executed[0][0]
        assert 'FROM "app"."event_category"' in provider.connection.executed[1][0]

    def test_local_timestamps_use_server_zone(self, make_provider, tool_settings):
        """Test local input and naive rows are read in the server's zone when none is configured."""
        provider = make_provider(
            [{'timezone': 'Asia/Singapore'}],
            [log_row(1, datetime(2025, 1, 1, 8, 0))],
            timezone=None
        )

        data = json.loads(retrieve_log(provider, tool_settings, 'C1', '2025-01-01T12:00:00', 5).to_json())

        assert "current_setting('TimeZone')" in provider.connection.executed[0][0]
        assert provider.connection.executed[1][1][1] == datetime(2025, 1, 1, 12, 0)
        assert data['beforeIso'] == '2025-01-01T04:00:00Z'
        assert data['records'][0]['createdIso'] == '2025-01-01T00:00:00Z'
        assert provider.acquire_count == 1

    @pytest.mark.parametrize("comp_id,before_iso", [
        ("", "2025-01-02T00:00:00Z"),
        ("C1", "yesterday"),
        ("C1", ""),
    ])
    def test_invalid_input(self, make_provider, tool_settings, comp_id, before_iso):
        """Test invalid input fails before connecting."""
        provider = make_provider()

        with pytest.raises(ValidationError):
            retrieve_log(provider, tool_settings, comp_id, before_iso, 10)

        assert provider.acquire_count == 0


class TestSummarizeLogContract:
    """Contract tests for summarize_log tool."""

    def test_summarize_with_entries(self, make_provider, tool_settings):
        """Test count plus first and last entries."""
        provider = make_provider(
            [{'total': 3}],
            [{'id': 1, 'comp_id': 'C1', 'created': datetime(2025, 1, 1), 'entry': 'first'}],
            [{'id': 3, 'comp_id': 'C1', 'created': datetime(2025, 1, 3), 'entry': 'last'}]
        )

        data = json.loads(summarize_log(provider, tool_settings, 'C1').to_json())

        assert data['compId'] == 'C1'
        assert data['totalEntries'] == 3
        assert data['firstEntry'] == {
            'id': 1,
            'createdIso': '2025-01-01T00:00:00Z',
            'createdUnixMs': 1735689600000,
            'entry': 'first'
        }
        assert data['lastEntry']['id'] == 3
        assert data['lastEntry']['entry'] == 'last'

        queries = [q for q, _ in provider.connection.executed]
        assert "ORDER BY created ASC, id ASC LIMIT 1" in queries[1]
        assert "ORDER BY created DESC, id DESC LIMIT 1" in queries[2]

    def test_summarize_empty(self, make_provider, tool_settings):
        """Test a zero count reports nulls and runs only the count query."""
        provider = make_provider([{'total': 0}])

        data = json.loads(summarize_log(provider, tool_settings, 'C9').to_json())

        assert data == {'compId': 'C9', 'totalEntries': 0, 'firstEntry': None, 'lastEntry': None}
        assert len(provider.connection.executed) == 1

    def test_summarize_single_entry(self, make_provider, tool_settings):
        """Test first and last are the same row when only one exists."""
        row = {'id': 1, 'comp_id': 'C1', 'created': datetime(2025, 1, 1), 'entry': 'only'}
        provider = make_provider([{'total': 1}], [row], [row])

        response = summarize_log(provider, tool_settings, 'C1')

        assert response.first_entry == response.last_entry

    def test_summarize_requires_comp_id(self, make_provider, tool_settings):
        """Test a blank component fails before connecting."""
        provider = make_provider()

        with pytest.raises(ValidationError):
            summarize_log(provider, tool_settings, '  ')

        assert provider.acquire_count == 0


class TestSearchLogContract:
    """Contract tests for search_log tool."""

    def test_search_window(self, make_provider, tool_settings):
        """Test oldest-first records inside an inclusive window."""
        provider = make_provider([
            log_row(1, datetime(2025, 1, 1, 0, 0), category_id=5),
            log_row(2, datetime(2025, 1, 1, 1, 0), category_id=5),
        ])

        data = json.loads(search_log(
            provider, tool_settings, '2025-01-01T00:00:00Z', '2025-01-01T01:00:00Z', 'C1'
        ).to_json())

        assert data['compId'] == 'C1'
        assert data['startIso'] == '2025-01-01T00:00:00Z'
        assert data['endIso'] == '2025-01-01T01:00:00Z'
        assert data['endUnixMs'] - data['startUnixMs'] == 3600000
        assert data['returnedCount'] == 2
        assert [r['id'] for r in data['records']] == [1, 2]
        assert data['records'][0]['logCategoryName'] is None

        query, params = provider.connection.executed[0]
        assert "BETWEEN %s AND %s" in query
        assert "AND comp_id = %s" in query
        assert query.endswith("ORDER BY created ASC, id ASC")
        assert params[2] == 'C1'
        assert len(provider.connection.executed) == 1

    def test_search_without_component(self, make_provider, tool_settings):
        """Test the component filter is optional."""
        provider = make_provider([])

        data = json.loads(search_log(
            provider, tool_settings, '2025-01-01T00:00:00Z', '2025-01-02T00:00:00Z'
        ).to_json())

        query, params = provider.connection.executed[0]
        assert "comp_id = %s" not in query
        assert len(params) == 2
        assert data['compId'] is None

    def test_equal_bounds_allowed(self, make_provider, tool_settings):
        """Test a zero-length window is valid."""
        provider = make_provider([])

        search_log(provider, tool_settings, '2025-01-01T00:00:00Z', '2025-01-01T00:00:00Z')

        assert provider.acquire_count == 1

    def test_start_after_end(self, make_provider, tool_settings):
        """Test an inverted window fails before connecting."""
        provider = make_provider()

        with pytest.raises(ValidationError) as exc_info:
            search_log(provider, tool_settings, '2025-01-02T00:00:00Z', '2025-01-01T00:00:00Z', 'C1')

        assert "Start timestamp must not be after end timestamp" in exc_info.value.message
        assert provider.acquire_count == 0

    def test_mixed_offsets_compared_in_utc(self, make_provider, tool_settings):
        """Test bounds with different offsets are compared as instants."""
        provider = make_provider([])

        search_log(provider, tool_settings, '2025-01-01T08:00:00+08:00', '2025-01-01T00:30:00Z')

        assert provider.acquire_count == 1

    def test_malformed_bound(self, make_provider, tool_settings):
        """Test a malformed bound fails before connecting."""
        provider = make_provider()

        with pytest.raises(ValidationError):
            search_log(provider, tool_settings, 'soon', '2025-01-01T00:00:00Z')

        assert provider.acquire_count == 0

    def test_mixed_bounds_ordered_in_server_zone(self, make_provider):
        """Test a local bound is placed on the timeline using the server's zone."""
        provider = make_provider([{'timezone': 'Asia/Singapore'}], timezone=None)

        with pytest.raises(ValidationError) as exc_info:
            search_log(provider, ToolSettings(), '2025-01-01T09:00:00', '2025-01-01T00:30:00Z')

        assert "Start timestamp must not be after end timestamp" in exc_info.value.message
        assert len(provider.connection.executed) == 1

    def test_mixed_bounds_in_server_zone_accepted(self, make_provider):
        """Test the same local bound is valid against a later instant."""
        provider = make_provider([{'timezone': 'Asia/Singapore'}], [], timezone=None)

        data = json.loads(search_log(
            provider, ToolSettings(), '2025-01-01T09:00:00', '2025-01-01T01:30:00Z'
        ).to_json())

        assert data['startIso'] == '2025-01-01T01:00:00Z'
        assert data['returnedCount'] == 0
