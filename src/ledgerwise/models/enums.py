"""Closed vocabularies stored on ledger records."""

from __future__ import annotations

from enum import Enum


class TransactionKind(str, Enum):
    EXPENSE = "Expense"
    INCOME = "Income"


class PaymentMethod(str, Enum):
    """How a transaction was funded; decides which balance it moves."""

    CASH = "Cash"
    BANK_ACCOUNT = "BankAccount"
    CREDIT_CARD = "CreditCard"
    LOAN_DEBIT = "LoanDebit"
    OTHER = "Other"


class AssetKind(str, Enum):
    BANK_ACCOUNT = "BankAccount"
    INVESTMENT = "Investment"
    REAL_ESTATE = "RealEstate"
    CRYPTOCURRENCY = "Cryptocurrency"
    VEHICLE = "Vehicle"
    OTHER = "Other"


class LiabilityKind(str, Enum):
    CREDIT_CARD = "CreditCard"
    MORTGAGE = "Mortgage"
    CAR_LOAN = "CarLoan"
    PERSONAL_LOAN = "PersonalLoan"
    STUDENT_LOAN = "StudentLoan"
    OTHER = "Other"


def parse_enum(enum_cls, raw):
    """Resolve ``raw`` by value or member name, case-insensitively.

    Returns ``None`` when nothing matches.
    """
    if isinstance(raw, enum_cls):
        return raw
    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None
    lowered = text.lower().replace("_", "")
    for member in enum_cls:
        if lowered in {member.value.lower(), member.name.lower().replace("_", "")}:
            return member
    return None
