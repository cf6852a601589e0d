"""Tests for alert queries (fetch by id, list with sort/paging)."""

from __future__ import annotations

import http.client
import json
import logging
from unittest.mock import MagicMock

import pytest

from cas_client.errors import (
    InvalidArgumentError,
    InvalidCredentialError,
    QueryError,
    RequestError,
)
from cas_client.models import (
    Credential,
    FetchAlertQuery,
    HttpMethod,
    ListAlertsQuery,
    RawResponse,
)
from cas_client.queries.alerts import (
    add_identity_alias,
    fetch_alert,
    list_alerts,
    parse_query,
    query_alerts,
)
from cas_client.transport.executor import RequestExecutor

ALERT_ID = "572caf4588011e452ec18ef0"


def _raw(payload) -> RawResponse:
    body = payload if isinstance(payload, bytes) else json.dumps(payload).encode("utf-8")
    return RawResponse(status=200, body=body)


def _mock_executor(payload) -> MagicMock:
    executor = MagicMock(spec=RequestExecutor)
    executor.execute.return_value = _raw(payload)
    return executor


def _list_body(executor: MagicMock) -> dict:
    return executor.execute.call_args.args[3]


# --- add_identity_alias ---


class TestIdentityAlias:
    def test_adds_identity(self):
        record = {"_id": ALERT_ID}
        assert add_identity_alias(record) is True
        assert record["Identity"] == ALERT_ID

    def test_existing_identity_left_alone(self):
        record = {"_id": ALERT_ID, "Identity": "other"}
        assert add_identity_alias(record) is False
        assert record["Identity"] == "other"

    def test_missing_id(self):
        record = {"title": "x"}
        assert add_identity_alias(record) is False
        assert "Identity" not in record

    def test_non_mapping_never_raises(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="cas_client.queries.alerts"):
            assert add_identity_alias(["not", "a", "record"]) is False
        assert "Identity alias skipped" in caplog.text


# --- fetch_alert ---


class TestFetchAlert:
    def test_returns_aliased_record(self, credential):
        executor = _mock_executor({"_id": ALERT_ID, "title": "x"})
        alert = fetch_alert(credential, ALERT_ID, executor=executor)

        assert alert["Identity"] == ALERT_ID
        assert alert["title"] == "x"
        executor.execute.assert_called_once_with(
            credential, f"/api/v1/alerts/{ALERT_ID}/", HttpMethod.GET,
        )

    def test_end_to_end_with_mocked_transport(self, credential, response):
        opener = MagicMock(return_value=response({"_id": ALERT_ID, "title": "x"}))
        executor = RequestExecutor(_opener=opener, _sleep=MagicMock())
        alert = fetch_alert(credential, ALERT_ID, executor=executor)
        assert alert == {"_id": ALERT_ID, "title": "x", "Identity": ALERT_ID}

    def test_invalid_identity_no_network(self, credential):
        executor = _mock_executor({})
        with pytest.raises(InvalidArgumentError):
            fetch_alert(credential, "not-hex", executor=executor)
        executor.execute.assert_not_called()

    @pytest.mark.parametrize("identity", [ALERT_ID[:-1], ALERT_ID + "0", "z" * 24])
    def test_identity_pattern(self, credential, identity):
        with pytest.raises(InvalidArgumentError):
            fetch_alert(credential, identity, executor=_mock_executor({}))

    def test_request_error_wrapped(self, credential):
        executor = MagicMock(spec=RequestExecutor)
        executor.execute.side_effect = RequestError("boom", status=500)
        with pytest.raises(QueryError) as exc_info:
            fetch_alert(credential, ALERT_ID, executor=executor)
        assert "Error calling API" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, RequestError)

    def test_credential_error_not_wrapped(self):
        bad = Credential(tenant="x", token="y")
        with pytest.raises(InvalidCredentialError):
            fetch_alert(bad, ALERT_ID, executor=RequestExecutor(_opener=MagicMock()))

    def test_invalid_json(self, credential):
        with pytest.raises(QueryError):
            fetch_alert(credential, ALERT_ID, executor=_mock_executor(b"<html>"))

    def test_non_object_body(self, credential):
        with pytest.raises(QueryError):
            fetch_alert(credential, ALERT_ID, executor=_mock_executor([1, 2]))


# --- list_alerts ---


class TestListAlerts:
    def test_default_body(self, credential):
        executor = _mock_executor({"data": []})
        assert list_alerts(credential, executor=executor) == []
        assert _list_body(executor) == {"skip": 0, "limit": 100}
        assert executor.execute.call_args.args[1] == "/api/v1/alerts/"
        assert executor.execute.call_args.args[2] == HttpMethod.POST

    def test_sort_body(self, credential):
        executor = _mock_executor({"data": []})
        list_alerts(
            credential, sort_by="Severity", sort_direction="Descending",
            executor=executor,
        )
        body = _list_body(executor)
        assert body["sortField"] == "severity"
        assert body["sortDirection"] == "desc"

    def test_ascending_date(self, credential):
        executor = _mock_executor({"data": []})
        list_alerts(
            credential, sort_by="Date", sort_direction="Ascending",
            size=5, skip=10, executor=executor,
        )
        assert _list_body(executor) == {
            "skip": 10, "limit": 5, "sortDirection": "asc", "sortField": "date",
        }

    @pytest.mark.parametrize(
        "kwargs",
        [{"sort_by": "Date"}, {"sort_direction": "Ascending"}],
    )
    def test_sort_pair_required(self, credential, kwargs):
        executor = _mock_executor({"data": []})
        with pytest.raises(InvalidArgumentError):
            list_alerts(credential, executor=executor, **kwargs)
        executor.execute.assert_not_called()

    @pytest.mark.parametrize("size", [0, 101])
    def test_size_out_of_range(self, credential, size):
        executor = _mock_executor({"data": []})
        with pytest.raises(InvalidArgumentError):
            list_alerts(credential, size=size, executor=executor)
        executor.execute.assert_not_called()

    @pytest.mark.parametrize("size", [1, 100])
    def test_size_bounds_accepted(self, credential, size):
        executor = _mock_executor({"data": [{"_id": ALERT_ID}]})
        assert len(list_alerts(credential, size=size, executor=executor)) == 1

    def test_negative_skip(self, credential):
        with pytest.raises(InvalidArgumentError):
            list_alerts(credential, skip=-1, executor=_mock_executor({"data": []}))

    def test_unknown_sort_field(self, credential):
        with pytest.raises(InvalidArgumentError):
            list_alerts(
                credential, sort_by="Title", sort_direction="Ascending",
                executor=_mock_executor({"data": []}),
            )

    def test_records_aliased(self, credential):
        executor = _mock_executor({
            "data": [{"_id": "a" * 24}, {"_id": "b" * 24, "Identity": "keep"}],
            "total": 2,
        })
        records = list_alerts(credential, executor=executor)
        assert [r["Identity"] for r in records] == ["a" * 24, "keep"]

    def test_filters_sent_intact(self, credential, response):
        opener = MagicMock(return_value=response({"data": []}))
        executor = RequestExecutor(_opener=opener, _sleep=MagicMock())
        filters = {"severity": {"eq": [2]}, "resolutionStatus": {"eq": [0]}}
        list_alerts(credential, filters=filters, executor=executor)

        sent = json.loads(opener.call_args[0][0].data)
        assert sent["filters"] == filters

    def test_sort_via_real_transport(self, credential, response):
        opener = MagicMock(return_value=response({"data": []}))
        executor = RequestExecutor(_opener=opener, _sleep=MagicMock())
        list_alerts(
            credential, sort_by="Severity", sort_direction="Descending",
            executor=executor,
        )
        sent = json.loads(opener.call_args[0][0].data)
        assert sent["sortField"] == "severity"
        assert sent["sortDirection"] == "desc"

    def test_missing_data_field(self, credential):
        with pytest.raises(QueryError):
            list_alerts(credential, executor=_mock_executor({"records": []}))

    def test_request_error_wrapped(self, credential):
        executor = MagicMock(spec=RequestExecutor)
        executor.execute.side_effect = RequestError("reset by peer")
        with pytest.raises(QueryError, match="reset by peer"):
            list_alerts(credential, executor=executor)

    def test_truncated_body_wrapped(self, credential):
        resp = MagicMock()
        resp.__enter__.return_value = resp
        resp.status = 200
        resp.headers = {}
        resp.read.side_effect = http.client.IncompleteRead(b'{"data": [')
        executor = RequestExecutor(_opener=MagicMock(return_value=resp), _sleep=MagicMock())

        with pytest.raises(QueryError, match="Error calling API") as exc_info:
            list_alerts(credential, executor=executor)
        assert isinstance(exc_info.value.__cause__, RequestError)
        assert isinstance(exc_info.value.__cause__.__cause__, http.client.IncompleteRead)


# --- query_alerts / parse_query ---


class TestQueryDispatch:
    def test_fetch_query(self, credential):
        executor = _mock_executor({"_id": ALERT_ID})
        result = query_alerts(
            credential, FetchAlertQuery(identity=ALERT_ID), executor=executor,
        )
        assert result == [{"_id": ALERT_ID, "Identity": ALERT_ID}]

    def test_list_query(self, credential):
        executor = _mock_executor({"data": [{"_id": ALERT_ID}]})
        result = query_alerts(credential, ListAlertsQuery(size=1), executor=executor)
        assert len(result) == 1
        assert _list_body(executor)["limit"] == 1

    def test_parse_query_by_mode(self):
        assert isinstance(parse_query({"mode": "fetch", "identity": ALERT_ID}), FetchAlertQuery)
        query = parse_query({"mode": "list", "size": 5})
        assert isinstance(query, ListAlertsQuery)
        assert query.size == 5

    def test_parse_query_rejects_unknown_mode(self):
        with pytest.raises(InvalidArgumentError):
            parse_query({"mode": "delete"})

    def test_parse_query_validates_fields(self):
        with pytest.raises(InvalidArgumentError):
            parse_query({"mode": "list", "sort_by": "Date"})
