import json

import pytest
from sqlalchemy.exc import DBAPIError

from app.db.rpc import RpcError, call_rpc, friendly_rpc_error, rpc_failure_message


class _Result:
    def __init__(self, value):
        self._value = value

    def scalar(self):
        return self._value


class StubSession:
    def __init__(self, value=None, error=None):
        self.value = value
        self.error = error
        self.statements = []
        self.committed = False
        self.rolled_back = False

    async def execute(self, stmt, params=None):
        self.statements.append((str(stmt), params))
        if self.error:
            raise self.error
        return _Result(self.value)

    async def commit(self):
        self.committed = True

    async def rollback(self):
        self.rolled_back = True


async def test_call_rpc_uses_named_arguments_and_decodes_json():
    session = StubSession(json.dumps({"success": True, "message": "ok"}))

    result = await call_rpc(session, "cancel_reservation", p_reservation_id="abc")

    sql, params = session.statements[0]
    assert "cancel_reservation(p_reservation_id => :p_reservation_id)" in sql
    assert params == {"p_reservation_id": "abc"}
    assert result == {"success": True, "message": "ok"}
    assert session.committed


async def test_call_rpc_wraps_database_errors():
    error = DBAPIError("SELECT 1", {}, Exception("Insufficient credits"))
    session = StubSession(error=error)

    with pytest.raises(RpcError) as exc:
        await call_rpc(session, "make_reservation", p_user_id="u")

    assert exc.value.function == "make_reservation"
    assert exc.value.message == "Insufficient credits"
    assert session.rolled_back


def test_failure_message_only_for_explicit_false():
    assert rpc_failure_message({"success": False, "message": "nope"}) == "nope"
    assert rpc_failure_message({"success": False}) == ""
    assert rpc_failure_message({"success": True}) is None
    assert rpc_failure_message(None) is None


def test_friendly_error_keeps_raw_message():
    rules = [(("too late",), "Muy tarde.")]
    assert friendly_rpc_error("Cancel too late", rules, "Error.") == "Muy tarde. (Cancel too late)"
    assert friendly_rpc_error("boom", rules, "Error.") == "Error. (boom)"
