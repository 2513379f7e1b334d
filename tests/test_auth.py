import pytest

import auth
from models import User
from sheets import StoreError


def test_hash_and_verify():
    hashed = auth.hash_password("s3cret")
    assert hashed.startswith("$2")
    assert auth.verify_password("s3cret", hashed)
    assert not auth.verify_password("wrong", hashed)


def test_plaintext_stored_password_never_matches():
    assert not auth.verify_password("admin123", "admin123")
    assert not auth.verify_password("", "")


def test_long_passwords_are_truncated_consistently():
    long_pw = "x" * 100
    hashed = auth.hash_password(long_pw)
    assert auth.verify_password("x" * 72, hashed)


def test_login_with_hashed_user(store, sheet):
    sheet.users["U1"] = {
        "id": "U1", "username": "sara", "name": "Sara", "role": "Partner",
        "password": auth.hash_password("pw12345"),
    }
    user = auth.login(store, " sara ", "pw12345")
    assert user is not None
    assert user.id == "U1"
    assert user.role == "partner"
    assert auth.login(store, "sara", "nope") is None
    assert auth.login(store, "ghost", "pw12345") is None
    assert auth.login(store, "", "") is None


def test_login_reports_unreachable_sheet(store, sheet):
    sheet.users["U1"] = {"id": "U1", "username": "admin", "name": "Admin", "role": "admin",
                         "password": auth.hash_password("admin123")}
    sheet.fail_actions.add("getUsers")
    with pytest.raises(StoreError) as exc:
        auth.login(store, "admin", "admin123")
    assert exc.value.result.error == "getUsers failed"


def test_fetch_users_raises_when_sheet_fails(store, sheet):
    sheet.fail_actions.add("getUsers")
    with pytest.raises(StoreError):
        auth.fetch_users(store)


def test_default_admin_created_once(store, sheet):
    assert auth.ensure_default_admin(store, "admin", "admin123") is True
    assert auth.ensure_default_admin(store, "admin", "admin123") is False
    assert len(sheet.users) == 1
    user = auth.login(store, "admin", "admin123")
    assert user is not None
    assert user.role == "admin"


def test_default_admin_skipped_when_users_unreachable(store, sheet):
    sheet.fail_actions.add("getUsers")
    assert auth.ensure_default_admin(store, "admin", "admin123") is False
    assert sheet.users == {}


def test_role_pages():
    assert "Admin" not in auth.allowed_pages("employee")
    assert "Reports" not in auth.allowed_pages("employee")
    assert "Members" in auth.allowed_pages("employee")
    assert "Reports" in auth.allowed_pages("partner")
    assert "Admin" in auth.allowed_pages("admin")
    assert auth.allowed_pages("stranger") == []
    assert auth.can_access("admin", "Admin")
    assert not auth.can_access("partner", "Admin")
    assert not auth.can_access("admin", "Nowhere")


def test_require_role(admin, employee):
    assert auth.require_role(admin, "admin") is admin
    with pytest.raises(PermissionError):
        auth.require_role(employee, "admin", "partner")
    with pytest.raises(PermissionError):
        auth.require_role(None, "admin")


def test_only_admin_adds_users(store, sheet, admin, employee):
    with pytest.raises(PermissionError):
        auth.add_user(store, employee, "new", "pw", "employee", "New Person")
    with pytest.raises(ValueError):
        auth.add_user(store, admin, "new", "pw", "owner", "New Person")
    result = auth.add_user(store, admin, "new", "pw12345", "employee", "New Person")
    assert result.success
    row = next(iter(sheet.users.values()))
    assert row["username"] == "new"
    assert row["password"] != "pw12345"
    assert auth.verify_password("pw12345", row["password"])


def test_admin_cannot_delete_self(store, admin):
    with pytest.raises(ValueError):
        auth.delete_user(store, admin, admin)
    other = User(id="U9", username="x", name="X", role="employee")
    assert auth.delete_user(store, admin, other).success


def test_change_password(store, sheet, employee):
    sheet.users["U-emp"] = {"id": "U-emp", "username": "employee", "name": "Gym Employee", "role": "employee",
                            "password": auth.hash_password("old-pass")}
    assert auth.change_password(store, employee, "new-pass").success
    assert auth.login(store, "employee", "new-pass") is not None
    assert auth.login(store, "employee", "old-pass") is None
