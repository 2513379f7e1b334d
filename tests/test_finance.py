from datetime import date

import pytest

import finance
from models import Expense, Transaction
from sheets import StoreError


def tx(tid, name, on, method="Cash", added_by="Gym Admin", amount=1000):
    return Transaction(tid, None, name, "0300", amount, "membership", method, on, added_by=added_by)


def test_add_transaction_records_actor(store, sheet, employee):
    result = finance.add_transaction(
        store, employee, member_name=" Ali ", member_phone="03001234567", amount="2,500",
        payment_method="Online", on=date(2024, 3, 2), notes="March",
    )
    assert result.success
    (row,) = sheet.transactions
    assert row["memberName"] == "Ali"
    assert row["amount"] == "2500"
    assert row["paymentMethod"] == "Online"
    assert row["addedBy"] == "Gym Employee"
    assert row["type"] == "membership"


def test_add_transaction_rejects_unknown_method(store, sheet, admin):
    with pytest.raises(ValueError):
        finance.add_transaction(store, admin, member_name="Ali", member_phone="", amount=10,
                                payment_method="Cheque", on=date(2024, 3, 2))
    assert sheet.transactions == []


def test_load_transactions(store, sheet, admin):
    finance.add_transaction(store, admin, member_name="Ali", member_phone="", amount=100,
                            payment_method="Cash", on=date(2024, 3, 2))
    loaded = finance.load_transactions(store)
    assert [t.member_name for t in loaded] == ["Ali"]
    assert loaded[0].amount == 100
    assert loaded[0].date == date(2024, 3, 2)
    sheet.fail_actions.add("getTransactions")
    with pytest.raises(StoreError):
        finance.load_transactions(store, use_cache=False)


def test_employees_only_see_their_own(admin, employee):
    txs = [tx("T1", "Ali", date(2024, 1, 1)), tx("T2", "Sara", date(2024, 1, 2), added_by="Gym Employee")]
    assert [t.id for t in finance.visible_transactions(txs, employee)] == ["T2"]
    assert [t.id for t in finance.visible_transactions(txs, admin)] == ["T1", "T2"]


def test_filter_transactions():
    txs = [
        tx("T1", "Ali", date(2024, 1, 1)),
        tx("T2", "Sara", date(2024, 3, 1), method="Online"),
        tx("T3", "Alia", None),
    ]
    assert [t.id for t in finance.filter_transactions(txs)] == ["T2", "T1", "T3"]
    assert [t.id for t in finance.filter_transactions(txs, search="ali")] == ["T1", "T3"]
    assert [t.id for t in finance.filter_transactions(txs, method="Online")] == ["T2"]


def test_expense_lifecycle(store, sheet, admin):
    assert finance.add_expense(store, admin, description="Electricity bill", amount=12000,
                               category="Utilities", on=date(2024, 3, 5)).success
    (expense,) = finance.load_expenses(store)
    assert expense.amount == 12000
    assert expense.added_by == "Gym Admin"

    assert finance.update_expense(store, admin, expense, description="Electricity bill", amount="12,500",
                                  category="Utilities", on=date(2024, 3, 5), notes="late fee").success
    (edited,) = finance.load_expenses(store)
    assert edited.amount == 12500
    assert edited.notes == "late fee"

    assert finance.delete_expense(store, admin, edited).success
    assert finance.load_expenses(store) == []


def test_expense_rejects_unknown_category(store, admin):
    with pytest.raises(ValueError):
        finance.add_expense(store, admin, description="Snacks", amount=300, category="Food", on=date(2024, 3, 5))


def test_filter_expenses():
    expenses = [
        Expense("E1", "Treadmill belt", 8000, "Equipment", date(2024, 2, 1)),
        Expense("E2", "Electricity", 12000, "Utilities", date(2024, 3, 1)),
    ]
    assert [e.id for e in finance.filter_expenses(expenses)] == ["E2", "E1"]
    assert [e.id for e in finance.filter_expenses(expenses, category="Equipment")] == ["E1"]
    assert [e.id for e in finance.filter_expenses(expenses, search="ELEC")] == ["E2"]


def test_add_transaction_rejects_unknown_type(store, sheet, admin):
    with pytest.raises(ValueError):
        finance.add_transaction(store, admin, member_name="Ali", member_phone="", amount=10,
                                payment_method="Cash", on=date(2024, 3, 2), kind="donation")
    assert sheet.transactions == []


def test_update_transaction_keeps_recorder(store, sheet, admin, employee):
    finance.add_transaction(store, employee, member_name="Ali", member_phone="0300", amount=2500,
                            payment_method="Cash", on=date(2024, 3, 2))
    (original,) = finance.load_transactions(store)

    result = finance.update_transaction(store, admin, original, member_name="Ali Raza", member_phone="0300",
                                        amount="2,000", payment_method="Online", on=date(2024, 3, 3),
                                        kind="renewal", notes="corrected")
    assert result.success
    (edited,) = finance.load_transactions(store)
    assert edited.id == original.id
    assert edited.member_name == "Ali Raza"
    assert edited.amount == 2000
    assert edited.payment_method == "Online"
    assert edited.type == "renewal"
    assert edited.date == date(2024, 3, 3)
    assert edited.added_by == "Gym Employee"
    assert len(sheet.transactions) == 1


def test_employee_cannot_edit_others_payments(store, sheet, admin, employee):
    finance.add_transaction(store, admin, member_name="Ali", member_phone="", amount=100,
                            payment_method="Cash", on=date(2024, 3, 2))
    (tx,) = finance.load_transactions(store)
    with pytest.raises(PermissionError):
        finance.update_transaction(store, employee, tx, member_name="Ali", member_phone="", amount=1,
                                   payment_method="Cash", on=date(2024, 3, 2), kind="membership")
    assert sheet.transactions[0]["amount"] == "100"


def test_member_transactions(store, sheet, admin):
    for on, member_id in ((date(2024, 1, 5), "M1"), (date(2024, 2, 5), "M1"), (date(2024, 2, 6), "M2")):
        finance.add_transaction(store, admin, member_name="Ali", member_phone="", amount=100,
                                payment_method="Cash", on=on, member_id=member_id)
    history = finance.member_transactions(store, "M1")
    assert [t.date for t in history] == [date(2024, 2, 5), date(2024, 1, 5)]
    assert {t.member_id for t in history} == {"M1"}


def test_member_transactions_needs_an_id(store, session):
    with pytest.raises(StoreError):
        finance.member_transactions(store, None)
    assert session.calls == []
