from __future__ import annotations

import pytest
import requests

from models import Catalog, User
from sheets import SheetsClient

SHEET_URL = "https://sheet.test/exec"
AUDIT_KEYS = ("action", "userId", "userName", "requestUserId", "requestUserName")


class FakeResponse:
    def __init__(self, payload=None, status_code: int = 200, text: str = ""):
        self._payload = payload
        self.status_code = status_code
        self.text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}", response=self)

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    """Stands in for requests.Session; `handler(params_or_json)` returns a FakeResponse."""

    def __init__(self, handler):
        self.handler = handler
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append(("GET", url, dict(params or {})))
        return self.handler(dict(params or {}))

    def post(self, url, headers=None, json=None, timeout=None):
        self.calls.append(("POST", url, json))
        return self.handler(json)


class FakeSheet:
    """In-memory version of the Apps Script backend. Values arrive as strings."""

    def __init__(self):
        self.members: dict[str, dict] = {}
        self.transactions: list[dict] = []
        self.expenses: dict[str, dict] = {}
        self.users: dict[str, dict] = {}
        self.logs: list[dict] = []
        self.fail_actions: set[str] = set()
        self._seq = 0

    def __call__(self, params: dict) -> FakeResponse:
        action = params.get("action", "")
        if action in self.fail_actions:
            return FakeResponse({"success": False, "error": f"{action} failed"})
        handler = getattr(self, f"_{action}", None)
        if handler is None:
            return FakeResponse({"success": False, "error": f"Unknown action {action}"})
        return FakeResponse(handler(params))

    def _next_id(self, prefix: str) -> str:
        self._seq += 1
        return f"{prefix}{self._seq:03d}"

    @staticmethod
    def _row(params: dict, *drop: str) -> dict:
        return {k: v for k, v in params.items() if k not in AUDIT_KEYS + drop}

    # members
    def _getMembers(self, p):
        return {"success": True, "members": list(self.members.values())}

    def _addMember(self, p):
        row = self._row(p)
        row["id"] = self._next_id("M")
        self.members[row["id"]] = row
        return {"success": True, "member": row}

    def _updateMember(self, p):
        mid = p["memberId"]
        if mid not in self.members:
            return {"success": False, "error": "Member not found"}
        row = self._row(p, "memberId")
        row["id"] = mid
        self.members[mid] = row
        return {"success": True, "member": row}

    def _deleteMember(self, p):
        if self.members.pop(p["memberId"], None) is None:
            return {"success": False, "error": "Member not found"}
        return {"success": True}

    # transactions
    def _getTransactions(self, p):
        return {"success": True, "transactions": list(self.transactions)}

    def _addTransaction(self, p):
        row = self._row(p)
        row["id"] = self._next_id("T")
        self.transactions.append(row)
        return {"success": True, "transaction": row}

    def _getTransactionsByMember(self, p):
        rows = [t for t in self.transactions if t.get("memberId") == p["memberId"]]
        return {"success": True, "transactions": rows}

    def _updateTransaction(self, p):
        tid = p["transactionId"]
        for i, t in enumerate(self.transactions):
            if t["id"] == tid:
                row = self._row(p, "transactionId")
                row["id"] = tid
                self.transactions[i] = row
                return {"success": True, "transaction": row}
        return {"success": False, "error": "Transaction not found"}

    # expenses
    def _getExpenses(self, p):
        return {"success": True, "expenses": list(self.expenses.values())}

    def _addExpense(self, p):
        row = self._row(p)
        row["id"] = self._next_id("E")
        self.expenses[row["id"]] = row
        return {"success": True, "expense": row}

    def _updateExpense(self, p):
        eid = p["expenseId"]
        row = self._row(p, "expenseId")
        row["id"] = eid
        self.expenses[eid] = row
        return {"success": True}

    def _deleteExpense(self, p):
        self.expenses.pop(p["expenseId"], None)
        return {"success": True}

    # users
    def _getUsers(self, p):
        return {"success": True, "users": list(self.users.values())}

    def _addUser(self, p):
        row = self._row(p)
        row["id"] = self._next_id("U")
        self.users[row["id"]] = row
        return {"success": True, "user": row}

    def _updateUser(self, p):
        uid = p["userId"]
        row = self._row(p, "userId")
        row["id"] = uid
        self.users[uid] = row
        return {"success": True}

    def _deleteUser(self, p):
        self.users.pop(p["userId"], None)
        return {"success": True}

    # misc
    def _logActivity(self, p):
        self.logs.append(dict(p))
        return {"success": True}

    def _getActivityLogs(self, p):
        return {"success": True, "logs": list(self.logs)}

    def _healthCheck(self, p):
        return {"success": True, "message": "ok"}


class FakeDispatcher:
    def __init__(self, result: bool = True, error: Exception | None = None):
        self.result = result
        self.error = error
        self.receipts = []

    def send_receipt(self, name, phone, plan_label, amount, date_label):
        self.receipts.append((name, phone, plan_label, amount, date_label))
        if self.error:
            raise self.error
        return self.result


@pytest.fixture
def catalog():
    return Catalog()


@pytest.fixture
def sheet():
    return FakeSheet()


@pytest.fixture
def session(sheet):
    return FakeSession(sheet)


@pytest.fixture
def store(session):
    return SheetsClient(SHEET_URL, session=session, cache_ttl=30)


@pytest.fixture
def admin():
    return User(id="U-admin", username="admin", name="Gym Admin", role="admin")


@pytest.fixture
def employee():
    return User(id="U-emp", username="employee", name="Gym Employee", role="employee")
