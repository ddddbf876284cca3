"""Tests for chotko/zabbix/client.py - JSON-RPC wire contract and failure taxonomy."""

from __future__ import annotations

import threading
from unittest.mock import MagicMock

import pytest
import requests
from chotko.exceptions import (
    APIError,
    AuthError,
    DecodeError,
    RequestCancelledError,
    TransportError,
    ZabbixError,
)
from chotko.zabbix.client import ZabbixClient
from factories import rpc_response


def sent_payload(session: MagicMock, index: int = -1) -> dict:
    return session.post.call_args_list[index].kwargs["json"]


def sent_headers(session: MagicMock, index: int = -1) -> dict:
    return session.post.call_args_list[index].kwargs["headers"]


class TestEnvelope:
    """Tests for the request envelope and headers."""

    def test_posts_to_api_endpoint(self, client: ZabbixClient, session: MagicMock):
        """Requests go to <base>/api_jsonrpc.php with a JSON-RPC 2.0 body."""
        session.post.return_value = rpc_response("7.0.0")
        client.version()

        args, kwargs = session.post.call_args
        assert args[0] == "https://zabbix.example.com/api_jsonrpc.php"
        assert kwargs["json"]["jsonrpc"] == "2.0"
        assert kwargs["json"]["method"] == "apiinfo.version"
        assert kwargs["headers"]["Content-Type"] == "application/json-rpc"

    def test_trailing_slash_is_trimmed(self, session: MagicMock):
        """Base URL with a trailing slash does not produce a double slash."""
        c = ZabbixClient("https://zabbix.example.com/", session=session)
        assert c.url == "https://zabbix.example.com/api_jsonrpc.php"

    def test_request_ids_increase(self, client: ZabbixClient, session: MagicMock):
        """Each request carries a fresh id."""
        session.post.return_value = rpc_response([])
        client.call("host.get", {})
        client.call("host.get", {})
        assert sent_payload(session, 0)["id"] == 1
        assert sent_payload(session, 1)["id"] == 2

    def test_version_never_sends_token(self, client: ZabbixClient, session: MagicMock):
        """apiinfo.version is sent without Authorization even when a token is set."""
        client.set_token("abc")
        session.post.return_value = rpc_response("7.0.0")
        assert client.version() == "7.0.0"
        assert "Authorization" not in sent_headers(session)

    def test_other_calls_send_bearer_token(self, client: ZabbixClient, session: MagicMock):
        """Authenticated calls carry Authorization: Bearer <token>."""
        client.set_token("abc")
        session.post.return_value = rpc_response([])
        client.get_all_hosts()
        assert sent_headers(session)["Authorization"] == "Bearer abc"

    def test_no_token_no_header(self, client: ZabbixClient, session: MagicMock):
        """Without a token no Authorization header is sent."""
        session.post.return_value = rpc_response([])
        client.get_all_hosts()
        assert "Authorization" not in sent_headers(session)

    def test_tls_verification_flag(self, session: MagicMock):
        """verify_tls=False is passed to requests as verify=False."""
        c = ZabbixClient("https://z", verify_tls=False, session=session)
        session.post.return_value = rpc_response("7.0.0")
        c.version()
        assert session.post.call_args.kwargs["verify"] is False


class TestFailures:
    """Tests for transport, decode and API error mapping."""

    def test_transport_failure(self, client: ZabbixClient, session: MagicMock):
        """requests exceptions become TransportError."""
        session.post.side_effect = requests.exceptions.ConnectionError("refused")
        with pytest.raises(TransportError, match="request failed"):
            client.version()

    def test_non_200_status_is_checked_before_decoding(
        self, client: ZabbixClient, session: MagicMock
    ):
        """A non-200 status raises TransportError with the status code."""
        response = rpc_response("ignored", status=502)
        session.post.return_value = response
        with pytest.raises(TransportError) as exc_info:
            client.version()
        assert exc_info.value.status_code == 502
        response.json.assert_not_called()

    def test_invalid_json(self, client: ZabbixClient, session: MagicMock):
        """An undecodable body raises DecodeError."""
        response = MagicMock(status_code=200)
        response.json.side_effect = ValueError("bad json")
        session.post.return_value = response
        with pytest.raises(DecodeError):
            client.version()

    def test_api_error(self, client: ZabbixClient, session: MagicMock):
        """An error object raises APIError carrying code, message and data."""
        session.post.return_value = rpc_response(
            error={"code": -32602, "message": "Invalid params.", "data": "No permissions."}
        )
        with pytest.raises(APIError) as exc_info:
            client.call("host.get", {})
        err = exc_info.value
        assert err.code == -32602
        assert err.message == "Invalid params."
        assert err.data == "No permissions."
        assert "API error -32602" in str(err)

    def test_api_error_is_zabbix_error(self):
        """All client failures share the ZabbixError base."""
        assert issubclass(APIError, ZabbixError)
        assert issubclass(TransportError, ZabbixError)
        assert issubclass(RequestCancelledError, ZabbixError)


class TestCancellation:
    """Tests for the shared cancellation event."""

    def test_cancelled_before_send(self, session: MagicMock):
        """A set cancel event stops the call before any request is sent."""
        cancel = threading.Event()
        cancel.set()
        c = ZabbixClient("https://z", cancel_event=cancel, session=session)
        with pytest.raises(RequestCancelledError):
            c.get_all_hosts()
        session.post.assert_not_called()

    def test_cancelled_during_send(self, session: MagicMock):
        """Cancellation observed after the response arrives discards the result."""
        cancel = threading.Event()
        c = ZabbixClient("https://z", cancel_event=cancel, session=session)

        def post(*args, **kwargs):
            cancel.set()
            return rpc_response([])

        session.post.side_effect = post
        with pytest.raises(RequestCancelledError):
            c.get_all_hosts()


class TestSession:
    """Tests for login/logout token lifecycle."""

    def test_login_logout_lifecycle(self, client: ZabbixClient, session: MagicMock):
        """Login stores the token, logout clears it, a second logout sends nothing."""
        assert client.token == ""

        session.post.return_value = rpc_response("session-token")
        client.login("Admin", "zabbix")
        assert client.token == "session-token"
        assert sent_payload(session)["params"] == {"username": "Admin", "password": "zabbix"}

        session.post.return_value = rpc_response(True)
        client.logout()
        assert client.token == ""
        assert sent_payload(session)["method"] == "user.logout"
        assert sent_headers(session)["Authorization"] == "Bearer session-token"

        calls = session.post.call_count
        client.logout()
        assert session.post.call_count == calls

    def test_login_rejected(self, client: ZabbixClient, session: MagicMock):
        """An API error during login becomes AuthError."""
        session.post.return_value = rpc_response(
            error={"code": -32500, "message": "Application error.", "data": "Incorrect user name"}
        )
        with pytest.raises(AuthError):
            client.login("Admin", "wrong")
        assert client.token == ""

    def test_logout_ignores_cancellation(self, session: MagicMock):
        """Logout still runs after the cancel event is set."""
        cancel = threading.Event()
        c = ZabbixClient("https://z", cancel_event=cancel, session=session)
        c.set_token("tok")
        cancel.set()
        session.post.return_value = rpc_response(True)
        c.logout()
        assert session.post.call_count == 1
        assert session.post.call_args.kwargs["timeout"] == 5

    def test_close_closes_session(self, client: ZabbixClient, session: MagicMock):
        client.close()
        session.close.assert_called_once_with()


class TestProblems:
    """Tests for the two-step active problem fetch."""

    def test_disabled_trigger_problems_are_filtered(
        self, client: ZabbixClient, session: MagicMock
    ):
        """Problems whose related trigger is disabled are dropped."""
        session.post.side_effect = [
            rpc_response([{"eventid": "A"}, {"eventid": "B"}, {"eventid": "C"}]),
            rpc_response(
                [
                    {"eventid": "A", "relatedObject": {"triggerid": "1", "status": "0"}},
                    {"eventid": "B", "relatedObject": {"triggerid": "2", "status": "1"}},
                    {"eventid": "C", "relatedObject": {"triggerid": "3", "status": "0"}},
                ]
            ),
        ]
        problems = client.get_active_problems()
        assert [p.eventid for p in problems] == ["A", "C"]
        assert sent_payload(session, 0)["method"] == "problem.get"
        assert sent_payload(session, 1)["method"] == "event.get"
        assert sent_payload(session, 1)["params"]["eventids"] == ["A", "B", "C"]

    def test_missing_related_status_is_kept(self, client: ZabbixClient, session: MagicMock):
        """Servers that leave relatedObject empty do not lose problems."""
        session.post.side_effect = [
            rpc_response([{"eventid": "A"}]),
            rpc_response([{"eventid": "A", "relatedObject": []}]),
        ]
        assert [p.eventid for p in client.get_active_problems()] == ["A"]

    def test_no_problems_skips_event_fetch(self, client: ZabbixClient, session: MagicMock):
        """An empty problem.get result does not issue event.get."""
        session.post.return_value = rpc_response([])
        assert client.get_active_problems() == []
        assert session.post.call_count == 1

    def test_min_severity_sends_severity_list(self, client: ZabbixClient, session: MagicMock):
        """Minimum severity 3 requests severities 3..5."""
        session.post.return_value = rpc_response([])
        client.get_problems_with_min_severity(3)
        assert sent_payload(session)["params"]["severities"] == [3, 4, 5]


class TestMutations:
    """Tests for acknowledge, trigger, host and macro updates."""

    def test_acknowledge_then_reload(self, client: ZabbixClient, session: MagicMock):
        """Acknowledging sends one event.acknowledge; the reload is the two-step fetch."""
        session.post.side_effect = [
            rpc_response({"eventids": ["123"]}),
            rpc_response([{"eventid": "123"}]),
            rpc_response([{"eventid": "123", "relatedObject": {"status": "0"}}]),
        ]
        client.acknowledge_problems(["123"])
        problems = client.get_active_problems()

        methods = [c.kwargs["json"]["method"] for c in session.post.call_args_list]
        assert methods == ["event.acknowledge", "problem.get", "event.get"]
        assert sent_payload(session, 0)["params"] == {"eventids": ["123"], "action": 2}
        assert len(problems) == 1

    def test_acknowledge_with_message_sets_message_bit(
        self, client: ZabbixClient, session: MagicMock
    ):
        """A message adds the message action bit."""
        session.post.return_value = rpc_response({"eventids": [123]})
        client.acknowledge_problems(["123"], "on it")
        params = sent_payload(session)["params"]
        assert params["action"] == 2 | 4
        assert params["message"] == "on it"

    def test_enable_disable_trigger(self, client: ZabbixClient, session: MagicMock):
        """Trigger status is sent as a string."""
        session.post.return_value = rpc_response({"triggerids": ["9"]})
        client.disable_trigger("9")
        assert sent_payload(session)["params"] == {"triggerid": "9", "status": "1"}
        client.enable_trigger("9")
        assert sent_payload(session)["params"] == {"triggerid": "9", "status": "0"}

    def test_invalid_trigger_priority(self, client: ZabbixClient, session: MagicMock):
        """Priorities outside 0..5 are rejected locally."""
        with pytest.raises(ZabbixError):
            client.set_trigger_priority("9", 7)
        session.post.assert_not_called()

    def test_delete_macro_sends_id_list(self, client: ZabbixClient, session: MagicMock):
        """usermacro.delete takes a plain list of ids."""
        session.post.return_value = rpc_response({"hostmacroids": ["5"]})
        client.delete_host_macro("5")
        assert sent_payload(session)["params"] == ["5"]

    def test_get_host_not_found(self, client: ZabbixClient, session: MagicMock):
        """get_host raises when the server returns nothing."""
        session.post.return_value = rpc_response([])
        with pytest.raises(ZabbixError, match="host not found"):
            client.get_host("42")


class TestHostCounts:
    """Tests for host state counting."""

    def test_counts_by_state(self, client: ZabbixClient, session: MagicMock):
        """Maintenance wins over availability; the rest bucket by interface state."""
        session.post.return_value = rpc_response(
            [
                {"hostid": "1", "interfaces": [{"available": "1"}]},
                {"hostid": "2", "interfaces": [{"available": "2"}]},
                {"hostid": "3", "interfaces": [{"available": "0"}]},
                {"hostid": "4", "maintenance_status": "1", "interfaces": [{"available": "2"}]},
            ]
        )
        counts = client.get_host_counts()
        assert (counts.ok, counts.problem, counts.unknown, counts.maintenance) == (1, 1, 1, 1)
        assert counts.total == 4
        assert sent_payload(session)["params"]["monitored_hosts"] is True


class TestHistory:
    """Tests for batched history fetches."""

    def test_history_partitioned_by_value_type(self, client: ZabbixClient, session: MagicMock):
        """Float and unsigned items are fetched in separate calls and merged by item id."""
        from factories import make_item

        float_item = make_item("1", "system.cpu.util")
        uint_item = make_item("2", "vfs.fs.size")
        uint_item.value_type = "3"
        session.post.side_effect = [
            rpc_response([{"itemid": "1", "clock": "100", "value": "1.5"}]),
            rpc_response([{"itemid": "2", "clock": "100", "value": "42"}]),
        ]
        history = client.get_items_history([float_item, uint_item], 3)
        assert sent_payload(session, 0)["params"]["history"] == 0
        assert sent_payload(session, 1)["params"]["history"] == 3
        assert history["1"][0].value_float() == 1.5
        assert history["2"][0].value_float() == 42.0

    def test_history_error_names_value_type(self, client: ZabbixClient, session: MagicMock):
        """A failed partition is reported with its value type."""
        from factories import make_item

        session.post.return_value = rpc_response(error={"code": -1, "message": "boom"})
        with pytest.raises(ZabbixError, match="failed to get float history"):
            client.get_items_history([make_item("1", "system.cpu.util")], 3)
