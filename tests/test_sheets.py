import pytest
import requests

from conftest import SHEET_URL, FakeResponse, FakeSession
from sheets import SheetsClient, StoreError, StoreResult

MEMBER_ROW = {"name": "Ali Raza", "phone": "03001234567", "membershipType": "Cardio", "fee": 2500}


def client_for(handler, **kwargs):
    session = FakeSession(handler)
    return SheetsClient(SHEET_URL, session=session, **kwargs), session


def test_action_is_sent_and_blank_params_dropped(store, session):
    store.add_member({**MEMBER_ROW, "cnic": "", "address": None})
    method, url, params = session.calls[0]
    assert (method, url) == ("GET", SHEET_URL)
    assert params["action"] == "addMember"
    assert params["fee"] == "2500"
    assert "cnic" not in params
    assert "address" not in params


def test_writes_carry_the_actor(store, session, admin):
    store.add_member(MEMBER_ROW, actor=admin)
    params = session.calls[0][2]
    assert params["userId"] == "U-admin"
    assert params["userName"] == "Gym Admin"


def test_writes_without_actor_use_system(store, session):
    store.add_member(MEMBER_ROW)
    assert session.calls[0][2]["userName"] == "System"


def test_user_actions_name_the_requester(store, session, admin):
    store.delete_user("U-emp", actor=admin)
    params = session.calls[0][2]
    assert params["userId"] == "U-emp"
    assert params["requestUserId"] == "U-admin"
    assert params["requestUserName"] == "Gym Admin"


def test_reads_are_cached(store, session):
    first = store.get_members()
    second = store.get_members()
    assert first is second
    assert len(session.calls) == 1


def test_uncached_read_goes_to_the_sheet(store, session):
    store.get_members()
    store.get_members(use_cache=False)
    assert len(session.calls) == 2


def test_successful_write_clears_cache(store, session, sheet):
    assert store.get_members().rows("members") == []
    store.add_member(MEMBER_ROW)
    rows = store.get_members().rows("members")
    assert len(rows) == 1
    assert rows[0]["name"] == "Ali Raza"
    assert [c[2]["action"] for c in session.calls] == ["getMembers", "addMember", "getMembers"]


def test_failed_write_keeps_cache(store, session, sheet):
    store.get_members()
    sheet.fail_actions.add("addMember")
    result = store.add_member(MEMBER_ROW)
    assert not result.success
    assert result.error == "addMember failed"
    store.get_members()
    assert [c[2]["action"] for c in session.calls] == ["getMembers", "addMember"]


def test_cache_expires():
    store, session = client_for(lambda p: FakeResponse({"success": True, "members": []}), cache_ttl=0)
    store.get_members()
    store.get_members()
    assert len(session.calls) == 2


def test_unsuccessful_reads_are_not_cached(sheet):
    store, session = client_for(sheet)
    sheet.fail_actions.add("getExpenses")
    store.get_expenses()
    store.get_expenses()
    assert len(session.calls) == 2


def test_timeout_becomes_failure():
    def handler(params):
        raise requests.Timeout("slow")

    store, _ = client_for(handler)
    result = store.get_members()
    assert not result.success
    assert "timeout" in result.error.lower()


def test_connection_error_becomes_failure():
    def handler(params):
        raise requests.ConnectionError("down")

    store, _ = client_for(handler)
    result = store.health_check()
    assert not result.success
    assert result.error.startswith("Network error")
    assert result.message == "down"


def test_http_error_becomes_failure():
    store, _ = client_for(lambda p: FakeResponse({}, status_code=500))
    result = store.get_transactions()
    assert not result.success
    assert result.error == "HTTP 500"


def test_non_json_body_becomes_failure():
    store, _ = client_for(lambda p: FakeResponse(ValueError("not json"), text="<html>"))
    result = store.get_users()
    assert not result.success
    assert result.error == "Invalid response from server"


def test_non_object_payload_becomes_failure():
    store, _ = client_for(lambda p: FakeResponse(["a", "b"]))
    assert not store.get_users().success


def test_unconfigured_client_makes_no_request():
    session = FakeSession(lambda p: pytest.fail("should not be called"))
    store = SheetsClient("", session=session)
    assert not store.is_configured
    result = store.get_members()
    assert not result.success
    assert "SHEETS_API_URL" in result.error
    assert session.calls == []


@pytest.mark.parametrize("missing", ["name", "phone", "membershipType", "fee"])
def test_add_member_checks_required_fields(store, session, missing):
    row = {**MEMBER_ROW, missing: ""}
    result = store.add_member(row)
    assert not result.success
    assert missing in result.error
    assert session.calls == []


def test_zero_fee_counts_as_present(store):
    assert store.add_member({**MEMBER_ROW, "fee": 0}).success


def test_missing_ids_fail_without_request(store, session):
    assert not store.update_member(None, MEMBER_ROW).success
    assert not store.delete_member("").success
    assert not store.update_transaction(None, {}).success
    assert not store.get_member_transactions(None).success
    assert not store.update_expense(None, {}).success
    assert not store.delete_expense(None).success
    assert not store.update_user("", {}).success
    assert not store.delete_user(None).success
    assert session.calls == []


def test_expense_required_fields(store):
    result = store.add_expense({"description": "Electricity", "amount": 12000})
    assert not result.success
    assert "category" in result.error


def test_log_activity_sends_details(store, session, employee):
    store.log_activity("member_added", "  Registered Ali  ", actor=employee, kind="member")
    params = session.calls[0][2]
    assert params["actionType"] == "member_added"
    assert params["details"] == "Registered Ali"
    assert params["type"] == "member"
    assert params["userName"] == "Gym Employee"


def test_result_rows_ignore_malformed_payloads():
    result = StoreResult(True, {"members": [{"id": "M1"}, "junk", None]})
    assert result.rows("members") == [{"id": "M1"}]
    assert StoreResult(True, {"members": "oops"}).rows("members") == []
    assert result.get("missing", 3) == 3


def test_store_error_carries_result():
    failed = StoreResult(False, error="Request timeout - Server may be busy")
    err = StoreError(failed)
    assert str(err) == "Request timeout - Server may be busy"
    assert err.result is failed
