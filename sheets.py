"""
sheets.py
Client for the spreadsheet-backed API (Google Apps Script web app).

Every call goes out as GET ?action=<name>&... and comes back as a JSON object
carrying at least `success`. Failures of any kind are returned as
StoreResult(success=False, ...) rather than raised.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field

import requests

from config import settings
from models import User

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = User(id="system", username="system", name="System", role="admin")

MEMBER_REQUIRED = ("name", "phone", "membershipType", "fee")
TRANSACTION_REQUIRED = ("memberName", "amount")
EXPENSE_REQUIRED = ("description", "amount", "category")
USER_REQUIRED = ("username", "password", "role", "name")


@dataclass(frozen=True)
class StoreResult:
    success: bool
    data: dict = field(default_factory=dict)
    error: str | None = None
    message: str | None = None

    def get(self, key: str, default=None):
        return self.data.get(key, default)

    def rows(self, key: str) -> list[dict]:
        value = self.data.get(key)
        if not isinstance(value, list):
            return []
        return [r for r in value if isinstance(r, dict)]


def _failure(error: str, message: str | None = None) -> StoreResult:
    return StoreResult(success=False, error=error, message=message)


def _missing(data: dict, required: tuple[str, ...]) -> StoreResult | None:
    missing = [f for f in required if data.get(f) in (None, "")]
    if missing:
        return _failure(f"Missing required fields: {', '.join(missing)}", "Please fill all required fields")
    return None


class SheetsClient:
    """Thin wrapper around the sheet API actions, with a short read cache."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        cache_ttl: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        configured = base_url if base_url is not None else settings.SHEETS_API_URL
        self._base_url = configured.strip()
        self._timeout = timeout or settings.SHEETS_TIMEOUT
        self._cache_ttl = settings.SHEETS_CACHE_TTL if cache_ttl is None else cache_ttl
        self._session = session or requests.Session()
        self._cache: dict[tuple, tuple[float, StoreResult]] = {}
        self._lock = threading.Lock()

    @property
    def is_configured(self) -> bool:
        return bool(self._base_url)

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()

    # ---------- Transport ----------

    def _request(self, action: str, params: dict | None = None, *, cache: bool = False) -> StoreResult:
        if not self.is_configured:
            return _failure("SHEETS_API_URL is not configured")

        query = {"action": action}
        for key, value in (params or {}).items():
            if value is None or value == "":
                continue
            query[key] = str(value)
        key = tuple(sorted(query.items()))

        if cache:
            with self._lock:
                hit = self._cache.get(key)
                if hit and time.monotonic() - hit[0] < self._cache_ttl:
                    return hit[1]
                self._cache.pop(key, None)

        try:
            response = self._session.get(self._base_url, params=query, timeout=self._timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.Timeout:
            logger.warning("Sheet API %s timed out", action)
            return _failure("Request timeout - Server may be busy")
        except requests.HTTPError as exc:
            logger.warning("Sheet API %s returned HTTP %s", action, exc.response.status_code)
            return _failure(f"HTTP {exc.response.status_code}")
        except ValueError:
            logger.warning("Sheet API %s returned a non-JSON body", action)
            return _failure("Invalid response from server")
        except requests.RequestException as exc:
            logger.warning("Sheet API %s failed: %s", action, exc)
            return _failure("Network error - Please check your connection", str(exc))

        if not isinstance(payload, dict):
            return _failure("Invalid response from server")

        result = StoreResult(
            success=bool(payload.get("success")),
            data=payload,
            error=payload.get("error"),
            message=payload.get("message"),
        )
        if not result.success:
            logger.info("Sheet API %s unsuccessful: %s", action, result.error)
        elif cache:
            with self._lock:
                self._cache[key] = (time.monotonic(), result)
        return result

    def _write(self, action: str, params: dict, actor: User | None) -> StoreResult:
        actor = actor or SYSTEM_ACTOR
        result = self._request(action, {**params, "userId": actor.id, "userName": actor.name})
        if result.success:
            self.clear_cache()
        return result

    # ---------- Members ----------

    def get_members(self, use_cache: bool = True) -> StoreResult:
        return self._request("getMembers", cache=use_cache)

    def add_member(self, record: dict, actor: User | None = None) -> StoreResult:
        return _missing(record, MEMBER_REQUIRED) or self._write("addMember", record, actor)

    def update_member(self, member_id: str | None, record: dict, actor: User | None = None) -> StoreResult:
        if not member_id:
            return _failure("Member ID is required", "Please provide a valid member ID")
        return self._write("updateMember", {"memberId": member_id, **record}, actor)

    def delete_member(self, member_id: str | None, actor: User | None = None) -> StoreResult:
        if not member_id:
            return _failure("Member ID is required", "Please provide a valid member ID")
        return self._write("deleteMember", {"memberId": member_id}, actor)

    # ---------- Transactions ----------

    def get_transactions(self, use_cache: bool = True) -> StoreResult:
        return self._request("getTransactions", cache=use_cache)

    def get_member_transactions(self, member_id: str | None) -> StoreResult:
        if not member_id:
            return _failure("Member ID is required", "Please provide a valid member ID")
        return self._request("getTransactionsByMember", {"memberId": member_id})

    def add_transaction(self, record: dict, actor: User | None = None) -> StoreResult:
        return _missing(record, TRANSACTION_REQUIRED) or self._write("addTransaction", record, actor)

    def update_transaction(self, transaction_id: str | None, record: dict, actor: User | None = None) -> StoreResult:
        if not transaction_id:
            return _failure("Transaction ID is required", "Please provide a valid transaction ID")
        return self._write("updateTransaction", {"transactionId": transaction_id, **record}, actor)

    # ---------- Expenses ----------

    def get_expenses(self, use_cache: bool = True) -> StoreResult:
        return self._request("getExpenses", cache=use_cache)

    def add_expense(self, record: dict, actor: User | None = None) -> StoreResult:
        return _missing(record, EXPENSE_REQUIRED) or self._write("addExpense", record, actor)

    def update_expense(self, expense_id: str | None, record: dict, actor: User | None = None) -> StoreResult:
        if not expense_id:
            return _failure("Expense ID is required", "Please provide a valid expense ID")
        return self._write("updateExpense", {"expenseId": expense_id, **record}, actor)

    def delete_expense(self, expense_id: str | None, actor: User | None = None) -> StoreResult:
        if not expense_id:
            return _failure("Expense ID is required", "Please provide a valid expense ID")
        return self._write("deleteExpense", {"expenseId": expense_id}, actor)

    # ---------- Users ----------

    def get_users(self) -> StoreResult:
        return self._request("getUsers")

    def _user_write(self, action: str, params: dict, actor: User | None) -> StoreResult:
        # user actions name the requester separately from the target userId
        actor = actor or SYSTEM_ACTOR
        result = self._request(action, {**params, "requestUserId": actor.id, "requestUserName": actor.name})
        if result.success:
            self.clear_cache()
        return result

    def add_user(self, record: dict, actor: User | None = None) -> StoreResult:
        return _missing(record, USER_REQUIRED) or self._user_write("addUser", record, actor)

    def update_user(self, user_id: str | None, record: dict, actor: User | None = None) -> StoreResult:
        if not user_id:
            return _failure("User ID is required", "Please provide a valid user ID")
        return self._user_write("updateUser", {"userId": user_id, **record}, actor)

    def delete_user(self, user_id: str | None, actor: User | None = None) -> StoreResult:
        if not user_id:
            return _failure("User ID is required", "Please provide a valid user ID")
        return self._user_write("deleteUser", {"userId": user_id}, actor)

    # ---------- Activity log / dashboard ----------

    def get_activity_logs(self) -> StoreResult:
        return self._request("getActivityLogs")

    def log_activity(self, action_type: str, details: str, actor: User | None = None,
                     kind: str = "system") -> StoreResult:
        actor = actor or SYSTEM_ACTOR
        return self._request(
            "logActivity",
            {"actionType": action_type, "details": details.strip(), "type": kind,
             "userId": actor.id, "userName": actor.name},
        )

    def health_check(self) -> StoreResult:
        return self._request("healthCheck")


class StoreError(RuntimeError):
    """A read the caller can't continue without came back unsuccessful."""

    def __init__(self, result: StoreResult) -> None:
        super().__init__(result.error or result.message or "Sheet API request failed")
        self.result = result
