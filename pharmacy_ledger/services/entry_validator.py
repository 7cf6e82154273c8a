"""
Entry validator — the double-entry rules for a transaction group.

A transaction group may only be stored when:
1. It has a description and a transaction date
2. It has at least two entries
3. Every entry names an account and carries exactly one
   strictly positive amount, debit or credit, never negative,
   with at most four decimal places
4. Total debits equal total credits within the tolerance

The validator never raises for bad input and never modifies
what it is given. Every problem found is reported as a
readable message; the caller decides whether to block.
"""

from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal

from pharmacy_ledger.config import get_settings
from pharmacy_ledger.schemas.validation import BalanceDetails, ValidationResult
from pharmacy_ledger.utils import ZERO, is_valid_object_id, parse_amount

MIN_ENTRIES = 2

# Amounts are stored with four decimal places; anything finer would be
# rounded away on save.
AMOUNT_EXPONENT = -4

CENT = Decimal("0.01")


def _field(item, name: str, default=None):
    """Read a field from a dict-like entry or an object with attributes."""
    if isinstance(item, Mapping):
        return item.get(name, default)
    return getattr(item, name, default)


def _entry_list(entries) -> list:
    if not isinstance(entries, (list, tuple)):
        return []
    return list(entries)


def _is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return False


class EntryValidator:
    """
    Checks candidate transaction groups before submission.

    The balance tolerance comes from settings unless given
    explicitly.
    """

    def __init__(self, tolerance: Decimal | None = None):
        if tolerance is None:
            tolerance = get_settings().BALANCE_TOLERANCE
        self.tolerance = Decimal(str(tolerance))

    # --- Individual rules ---

    def validate_basic_info(self, transaction) -> ValidationResult:
        """Description must not be blank; a transaction date is required."""
        errors = []
        if _is_blank(_field(transaction, "description")):
            errors.append("Description is required")
        if _is_blank(_field(transaction, "transaction_date")):
            errors.append("Transaction date is required")
        return ValidationResult(is_valid=not errors, errors=errors)

    def validate_entries(self, entries) -> ValidationResult:
        """
        Check entry count, then every entry on its own.

        A list that is too short fails with a single message;
        per-entry checks would only add noise on top of it.
        """
        entries = _entry_list(entries)
        if len(entries) < MIN_ENTRIES:
            return ValidationResult(
                is_valid=False,
                errors=[
                    f"A transaction needs at least {MIN_ENTRIES} entries"
                ],
            )

        errors = []
        for index, entry in enumerate(entries, start=1):
            errors.extend(self._entry_errors(index, entry))
        return ValidationResult(is_valid=not errors, errors=errors)

    def _entry_errors(self, index: int, entry) -> list[str]:
        prefix = f"Entry {index}"
        errors = []

        if _is_blank(_field(entry, "account_id")):
            errors.append(f"{prefix}: account is required")

        debit = parse_amount(_field(entry, "debit_amount"))
        credit = parse_amount(_field(entry, "credit_amount"))
        if debit is None:
            errors.append(f"{prefix}: debit amount is not a number")
        if credit is None:
            errors.append(f"{prefix}: credit amount is not a number")
        if debit is None or credit is None:
            return errors

        if debit == ZERO and credit == ZERO:
            errors.append(
                f"{prefix}: either the debit or the credit amount "
                f"must be greater than 0"
            )
        if debit > ZERO and credit > ZERO:
            errors.append(
                f"{prefix}: debit and credit amounts cannot both be set"
            )
        if debit < ZERO:
            errors.append(f"{prefix}: debit amount cannot be negative")
        if credit < ZERO:
            errors.append(f"{prefix}: credit amount cannot be negative")
        for side, amount in (("debit", debit), ("credit", credit)):
            if amount.normalize().as_tuple().exponent < AMOUNT_EXPONENT:
                errors.append(
                    f"{prefix}: {side} amount cannot have more than "
                    f"4 decimal places"
                )
        return errors

    def validate_balance(self, entries) -> ValidationResult:
        """Total debits must equal total credits within the tolerance."""
        details = self.get_balance_details(entries)
        if details.is_balanced:
            return ValidationResult(is_valid=True, errors=[])
        difference = details.difference.quantize(
            CENT, rounding=ROUND_HALF_UP
        )
        return ValidationResult(
            is_valid=False,
            errors=[
                f"Debits and credits do not balance, "
                f"difference: {difference}"
            ],
        )

    # --- Entry point ---

    def validate_transaction(self, transaction) -> ValidationResult:
        """
        Run every rule and combine the messages.

        This is the check callers run before handing a
        transaction group to the persistence layer.
        """
        entries = _entry_list(_field(transaction, "entries"))
        errors = []
        for result in (
            self.validate_basic_info(transaction),
            self.validate_entries(entries),
            self.validate_balance(entries),
        ):
            errors.extend(result.errors)
        return ValidationResult(is_valid=not errors, errors=errors)

    # --- Figures ---

    @staticmethod
    def _totals(entries) -> tuple[Decimal, Decimal]:
        total_debit = ZERO
        total_credit = ZERO
        for entry in _entry_list(entries):
            total_debit += parse_amount(_field(entry, "debit_amount")) or ZERO
            total_credit += parse_amount(_field(entry, "credit_amount")) or ZERO
        return total_debit, total_credit

    def calculate_total_amount(self, entries) -> Decimal:
        """
        Headline amount of a transaction group: the sum of its debits.

        For a balanced group this equals the sum of its credits.
        """
        total_debit, _ = self._totals(entries)
        return total_debit

    def get_balance_details(self, entries) -> BalanceDetails:
        total_debit, total_credit = self._totals(entries)
        difference = abs(total_debit - total_credit)
        return BalanceDetails(
            is_balanced=difference <= self.tolerance,
            total_debit=total_debit,
            total_credit=total_credit,
            difference=difference,
        )

    is_valid_object_id = staticmethod(is_valid_object_id)
