"""Tests for ``spine_sql.executor`` against recording fakes.

Covers:
- Positional binding of exactly len(params) values, in order
- Row mapping order, empty results, not-found, >1 row
- Generated keys in reported order, RETURNING and lastrowid paths
- Error translation to ExecutionError with the original cause
- Connection release exactly once on every exit path
- Statement hook invocation
"""

from __future__ import annotations

import enum
from pathlib import Path

import pytest

from spine_sql.dialect import PostgreSQLDialect, SQLiteDialect
from spine_sql.errors import ExecutionError, IncorrectResultSizeError, IntegrityError
from spine_sql.executor import StatementExecutor
from spine_sql.keys import KeyCollector
from tests._support.fault_injection import (
    FakeDriverError,
    FakeProvider,
    FaultSpec,
    ProviderExhaustedError,
)


def first_column(row):
    return row.get_object(1)


def pair(row):
    return (row.get_int(1), row.get_str(2))


def exploding_mapper(row):
    raise RuntimeError("mapper failed")


class Color(enum.Enum):
    RED = "red"


class TestBinding:
    @pytest.mark.parametrize(
        "params",
        [
            (),
            ("alice",),
            ("alice", "pw", "a@x.com"),
            (1, None, 2.5, b"\x00\x01", "text", True),
        ],
    )
    def test_binds_exactly_the_given_params_in_order(self, params):
        provider = FakeProvider()
        StatementExecutor(provider).execute_update("update t set a = ?", *params)
        assert provider.executed == [("update t set a = ?", params)]

    def test_sql_text_passed_through_unchanged(self):
        provider = FakeProvider()
        sql = "delete from users where id = ? and account = ?"
        StatementExecutor(provider).execute_update(sql, 1, "alice")
        assert provider.executed[0][0] == sql

    def test_coerces_enum_and_path(self):
        provider = FakeProvider()
        StatementExecutor(provider).execute_update("x", Color.RED, Path("/tmp/a.db"))
        assert provider.executed[0][1] == ("red", "/tmp/a.db")

    def test_query_params_bound(self):
        provider = FakeProvider(rows=[(1,)])
        StatementExecutor(provider).query_for_list("select a from t where b = ?", first_column, 7)
        assert provider.executed == [("select a from t where b = ?", (7,))]


class TestQueryForList:
    def test_maps_rows_in_cursor_order(self):
        provider = FakeProvider(rows=[(1, "a"), (2, "b"), (3, "c")])
        result = StatementExecutor(provider).query_for_list("select", pair)
        assert result == [(1, "a"), (2, "b"), (3, "c")]

    def test_no_rows_returns_empty_list(self):
        provider = FakeProvider(rows=[])
        result = StatementExecutor(provider).query_for_list("select", pair)
        assert result == []
        assert result is not None

    def test_mapper_called_once_per_row(self):
        calls = []

        def mapper(row):
            calls.append(row.row_number)
            return row.get_object(1)

        provider = FakeProvider(rows=[(10,), (20,)])
        StatementExecutor(provider).query_for_list("select", mapper)
        assert calls == [1, 2]

    def test_row_detached_after_mapper_returns(self):
        kept = []
        provider = FakeProvider(rows=[(1,)])
        StatementExecutor(provider).query_for_list("select", kept.append)
        with pytest.raises(ExecutionError, match="after its mapper returned"):
            kept[0].get_object(1)


class TestQueryForObject:
    def test_single_row_equals_direct_mapping(self):
        provider = FakeProvider(rows=[(1, "alice")])
        result = StatementExecutor(provider).query_for_object("select", pair, 1)
        assert result == (1, "alice")

    def test_zero_rows_is_not_found(self):
        provider = FakeProvider(rows=[])
        assert StatementExecutor(provider).query_for_object("select", pair) is None
        assert provider.release_count == 1

    def test_more_than_one_row_raises_incorrect_result_size(self):
        provider = FakeProvider(rows=[(1, "a"), (2, "b")])
        with pytest.raises(IncorrectResultSizeError) as exc_info:
            StatementExecutor(provider).query_for_object("select x", pair)
        assert isinstance(exc_info.value, IntegrityError)
        assert exc_info.value.expected == 1
        assert exc_info.value.sql == "select x"
        assert provider.release_count == 1

    def test_more_than_one_row_does_not_map(self):
        calls = []
        provider = FakeProvider(rows=[(1,), (2,)])
        with pytest.raises(IncorrectResultSizeError):
            StatementExecutor(provider).query_for_object("select", calls.append)
        assert calls == []


class TestGeneratedKeys:
    def test_keys_in_reported_order(self):
        provider = FakeProvider(rows=[(3,), (1,), (2,)])
        keys = StatementExecutor(provider).execute_update_returning_keys(
            "insert into t (a) values (?)", "id", "x"
        )
        assert keys == [3, 1, 2]

    def test_no_keys_returns_empty_list(self):
        provider = FakeProvider(rows=[])
        keys = StatementExecutor(provider).execute_update_returning_keys("insert", "id")
        assert keys == []

    def test_returning_clause_appended_for_named_column(self):
        provider = FakeProvider(rows=[(1,)])
        StatementExecutor(provider).execute_update_returning_keys(
            "insert into users (account) values (?);", "user_id", "alice"
        )
        assert provider.executed == [
            ("insert into users (account) values (?)\nRETURNING user_id", ("alice",))
        ]

    def test_postgresql_dialect_uses_returning(self):
        provider = FakeProvider(rows=[(42,)], dialect=PostgreSQLDialect())
        keys = StatementExecutor(provider).execute_update_returning_keys(
            "insert into t (a) values (%s)", "id", 1
        )
        assert keys == [42]
        assert provider.executed[0][0].endswith("RETURNING id")

    def test_lastrowid_fallback_without_returning(self):
        provider = FakeProvider(
            rowcount=1, lastrowid=5, dialect=SQLiteDialect(version_info=(3, 31, 1))
        )
        keys = StatementExecutor(provider).execute_update_returning_keys(
            "insert into t (a) values (?)", "id", 1
        )
        assert keys == [5]
        assert provider.executed[0][0] == "insert into t (a) values (?)"

    def test_lastrowid_fallback_ignored_when_no_row_affected(self):
        provider = FakeProvider(
            rowcount=0, lastrowid=5, dialect=SQLiteDialect(version_info=(3, 31, 1))
        )
        keys = StatementExecutor(provider).execute_update_returning_keys("insert", "id")
        assert keys == []

    def test_caller_owned_collector_is_fed(self):
        provider = FakeProvider(rows=[(1,), (2,)])
        collector = KeyCollector("id")
        StatementExecutor(provider).execute_update_with_collector("insert", collector)
        assert collector.get_keys() == [1, 2]

    def test_used_collector_rejected(self):
        collector = KeyCollector("id")
        collector.add_key(1)
        provider = FakeProvider(rows=[(2,)])
        with pytest.raises(ValueError, match="single-use"):
            StatementExecutor(provider).execute_update_with_collector("insert", collector)
        assert provider.acquire_count == 0


class TestErrorTranslation:
    @pytest.mark.parametrize("stage", ["cursor", "execute", "fetch", "close"])
    def test_driver_error_becomes_execution_error(self, stage):
        original = FakeDriverError(f"boom at {stage}")
        provider = FakeProvider(rows=[(1,)], fault=FaultSpec(stage, error=original))
        with pytest.raises(ExecutionError) as exc_info:
            StatementExecutor(provider).query_for_list("select a from t", first_column)
        assert exc_info.value.cause is original
        assert exc_info.value.__cause__ is original
        assert exc_info.value.sql == "select a from t"

    def test_error_context_describes_statement(self):
        provider = FakeProvider(fault=FaultSpec("execute"))
        with pytest.raises(ExecutionError) as exc_info:
            StatementExecutor(provider).execute_update("update t set a = ?", 1)
        context = exc_info.value.context.to_dict()
        assert context == {
            "sql": "update t set a = ?",
            "param_count": 1,
            "backend": "sqlite",
            "operation": "execute_update",
        }

    def test_fault_mid_traversal_returns_no_partial_result(self):
        provider = FakeProvider(
            rows=[(1,), (2,), (3,)], fault=FaultSpec("fetch", after_rows=2)
        )
        result = None
        with pytest.raises(ExecutionError):
            result = StatementExecutor(provider).query_for_list("select", first_column)
        assert result is None
        assert provider.last_connection.fetched == 2

    def test_provider_error_propagates_unchanged(self):
        error = ProviderExhaustedError("pool exhausted")
        provider = FakeProvider(fault=FaultSpec("acquire", error=error))
        with pytest.raises(ProviderExhaustedError) as exc_info:
            StatementExecutor(provider).execute_update("update t set a = 1")
        assert exc_info.value is error
        assert provider.release_count == 0

    def test_mapper_exception_propagates_unchanged(self):
        def broken(row):
            raise KeyError("no such field")

        provider = FakeProvider(rows=[(1,)])
        with pytest.raises(KeyError):
            StatementExecutor(provider).query_for_list("select", broken)

    @pytest.mark.parametrize(
        "error",
        [OverflowError("int too large"), TypeError("not all arguments converted")],
    )
    def test_binding_failure_becomes_execution_error(self, error):
        provider = FakeProvider(fault=FaultSpec("execute", error=error))
        with pytest.raises(ExecutionError) as exc_info:
            StatementExecutor(provider).execute_update("update t set a = ?", 2**70)
        assert exc_info.value.cause is error
        assert exc_info.value.context.operation == "execute_update"
        assert provider.release_count == 1

    def test_out_of_range_column_is_execution_error(self):
        provider = FakeProvider(rows=[(1,)])
        with pytest.raises(ExecutionError, match="out of range"):
            StatementExecutor(provider).query_for_object("select", lambda row: row.get_object(2))


class TestConnectionRelease:
    OPERATIONS = {
        "execute_update": lambda jdbc: jdbc.execute_update("update t set a = ?", 1),
        "returning_keys": lambda jdbc: jdbc.execute_update_returning_keys("insert", "id", 1),
        "query_for_list": lambda jdbc: jdbc.query_for_list("select", first_column),
        "query_for_object": lambda jdbc: jdbc.query_for_object("select", first_column),
    }

    @pytest.mark.parametrize("operation", sorted(OPERATIONS))
    def test_released_once_on_success(self, operation):
        provider = FakeProvider(rows=[(1,)])
        self.OPERATIONS[operation](StatementExecutor(provider))
        assert provider.acquire_count == 1
        assert provider.release_count == 1
        assert provider.released == provider.connections

    @pytest.mark.parametrize(
        ("operation", "stage"),
        [
            (operation, stage)
            for operation in sorted(OPERATIONS)
            for stage in ("cursor", "execute", "fetch", "close")
            # execute_update never reads the cursor
            if (operation, stage) != ("execute_update", "fetch")
        ],
    )
    def test_released_once_on_driver_failure(self, operation, stage):
        provider = FakeProvider(rows=[(1,)], fault=FaultSpec(stage))
        with pytest.raises(ExecutionError):
            self.OPERATIONS[operation](StatementExecutor(provider))
        assert provider.release_count == 1

    def test_released_once_when_mapper_raises(self):
        provider = FakeProvider(rows=[(1,)])
        with pytest.raises(RuntimeError):
            StatementExecutor(provider).query_for_list("select", exploding_mapper)
        assert provider.release_count == 1

    def test_close_failure_does_not_mask_mapper_error(self):
        provider = FakeProvider(rows=[(1,)], fault=FaultSpec("close"))
        with pytest.raises(RuntimeError, match="mapper failed"):
            StatementExecutor(provider).query_for_list("select", exploding_mapper)
        assert provider.last_connection.cursors[0].closed is True
        assert provider.release_count == 1

    def test_close_failure_does_not_mask_result_size_error(self):
        provider = FakeProvider(rows=[(1,), (2,)], fault=FaultSpec("close"))
        with pytest.raises(IncorrectResultSizeError):
            StatementExecutor(provider).query_for_object("select", first_column)
        assert provider.release_count == 1

    def test_cursor_closed_on_failure(self):
        provider = FakeProvider(rows=[(1,)], fault=FaultSpec("fetch"))
        with pytest.raises(ExecutionError):
            StatementExecutor(provider).query_for_list("select", first_column)
        assert provider.last_connection.cursors[0].closed is True

    def test_one_connection_per_call(self):
        provider = FakeProvider(rows=[(1,)])
        jdbc = StatementExecutor(provider)
        jdbc.query_for_list("select", first_column)
        jdbc.execute_update("update")
        assert provider.acquire_count == 2
        assert provider.release_count == 2
        assert provider.connections[0] is not provider.connections[1]


class TestStatementHook:
    def test_hook_sees_sql_before_execution(self):
        seen = []
        provider = FakeProvider(fault=FaultSpec("execute"))
        jdbc = StatementExecutor(provider, statement_hook=seen.append)
        with pytest.raises(ExecutionError):
            jdbc.execute_update("update t set a = 1")
        assert seen == ["update t set a = 1"]

    def test_hook_called_once_per_statement(self):
        seen = []
        provider = FakeProvider(rows=[(1,)])
        jdbc = StatementExecutor(provider, statement_hook=seen.append)
        jdbc.query_for_list("select 1", first_column)
        jdbc.execute_update_returning_keys("insert into t values (?)", "id", 1)
        assert seen == ["select 1", "insert into t values (?)\nRETURNING id"]

    def test_no_hook_by_default(self):
        provider = FakeProvider()
        StatementExecutor(provider).execute_update("update")
        assert provider.release_count == 1


class TestTransactionPassthrough:
    def test_transaction_delegates_to_provider(self):
        provider = FakeProvider()
        with StatementExecutor(provider).transaction() as conn:
            assert conn is provider.last_connection
        assert provider.release_count == 1
        assert conn.commits == 1
