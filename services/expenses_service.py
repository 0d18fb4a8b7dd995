"""Service layer for handling expense-related logic."""
import json
import logging
import math
import re
from datetime import date, datetime
from decimal import Context, Decimal, ROUND_HALF_UP
from typing import Any, Dict, List

from starlette.requests import ClientDisconnect, Request

from models.expense import Expense, NewExpense
from services.expense_store import ExpenseStore
from utils.errors import InvalidAmount, InvalidBody, MissingField

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("amount", "description", "category", "date")

# Leading decimal number, the way a lenient float parser reads "12.5abc" as 12.5.
# ASCII digits only; float() would also accept other scripts' digits.
_NUMBER_PREFIX = re.compile(r"\s*([+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)")
_TWO_PLACES = Decimal("0.01")
# Enough digits to quantize any finite float without InvalidOperation
_AMOUNT_CONTEXT = Context(prec=400)


# --- Request Body Handling ---

def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


async def read_json_body(request: Request) -> Any:
    """
    Reads the request stream to the end and parses it as JSON.
    Any stream, decoding or parsing failure is reported as InvalidBody.
    """
    chunks = []
    try:
        async for chunk in request.stream():
            chunks.append(chunk)
    except ClientDisconnect:
        logger.warning("Client disconnected while the request body was being read.")
        raise InvalidBody()

    raw_body = b"".join(chunks)
    try:
        body = json.loads(raw_body.decode("utf-8"), parse_constant=_reject_constant)
    except ValueError as e:
        logger.warning(f"Rejecting request body ({len(raw_body)} bytes): {e}")
        raise InvalidBody()

    if body is None:
        logger.warning("Rejecting request body: JSON null has no fields.")
        raise InvalidBody()
    return body


# --- Validation Helpers ---

def is_falsy(value: Any) -> bool:
    """
    Falsy in the JSON sense: null, false, empty string or a zero number.
    Empty arrays and objects count as present.
    """
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, float):
        return value == 0 or math.isnan(value)
    if isinstance(value, int):
        # Arbitrarily large JSON integers must not go through float()
        return value == 0
    return False


def _as_text(value: Any) -> str:
    """Text form of a JSON value as a lenient number parser sees it: arrays join with ','."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return ",".join(_as_text(item) for item in value)
    if isinstance(value, dict):
        return "[object Object]"
    return repr(value)


def coerce_amount(value: Any) -> float:
    """Parses the leading number out of value. Returns nan when there is none."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return float(value)
        except OverflowError:
            return math.inf
    match = _NUMBER_PREFIX.match(_as_text(value))
    if not match:
        return math.nan
    return float(match.group(1))


def format_amount(amount: float) -> str:
    """Two decimal places, rounding half up on the exact value of the float.
    Large amounts are written out in full, never in exponent form."""
    return str(Decimal(amount).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP, context=_AMOUNT_CONTEXT))


def validate_expense_payload(payload: Any) -> NewExpense:
    """
    Runs the create checks in order and stops at the first failure:
    required fields (amount, description, category, date), then amount.
    """
    fields: Dict[str, Any] = payload if isinstance(payload, dict) else {}

    for field in REQUIRED_FIELDS:
        if is_falsy(fields.get(field)):
            logger.warning(f"Create rejected: missing required field '{field}'.")
            raise MissingField(field)

    amount = coerce_amount(fields["amount"])
    # Infinite amounts are rejected rather than stored as "Infinity"
    if math.isnan(amount) or math.isinf(amount) or amount <= 0:
        logger.warning(f"Create rejected: invalid amount {fields['amount']!r}.")
        raise InvalidAmount()

    return NewExpense(
        amount=format_amount(amount),
        description=fields["description"],
        category=fields["category"],
        date=fields["date"],
    )


# --- Store Operations ---

def add_expense(store: ExpenseStore, payload: Any) -> Expense:
    """Validates payload and appends it to the store. Nothing is stored on failure."""
    new_expense = validate_expense_payload(payload)
    expense = store.append(new_expense)
    logger.info(f"Added expense id={expense.id} amount={expense.amount} category={expense.category!r}.")
    return expense


def _date_sort_key(expense: Expense) -> date:
    # Unparseable dates sort after every real date when ordering newest first
    if isinstance(expense.date, str):
        try:
            return datetime.strptime(expense.date, "%Y-%m-%d").date()
        except ValueError:
            pass
    return date.min


def get_all_expenses(store: ExpenseStore) -> List[Expense]:
    """All expenses, newest date first. Equal dates keep insertion order."""
    expenses = sorted(store.list(), key=_date_sort_key, reverse=True)
    logger.info(f"Returning {len(expenses)} expenses sorted by date (desc).")
    return expenses
