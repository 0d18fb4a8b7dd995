"""In-memory expense store. Data lives only as long as the process does."""
import logging
from typing import Iterable, List

from models.expense import Expense, NewExpense

logger = logging.getLogger(__name__)

EXAMPLE_EXPENSES = [
    NewExpense(amount="50.00", description="Groceries", category="Food", date="2023-11-29"),
    NewExpense(amount="15.50", description="Coffee", category="Food", date="2023-11-29"),
    NewExpense(amount="300.00", description="Rent", category="Housing", date="2023-12-01"),
]


class ExpenseStore:
    """Ordered collection of expenses plus the next-id counter.

    Ids start at 1, are assigned on append and are never reused.
    Not thread-safe: callers are expected to run on a single event loop.
    """

    def __init__(self, expenses: Iterable[NewExpense] = ()):
        self._expenses: List[Expense] = []
        self._next_id = 1
        for new_expense in expenses:
            self.append(new_expense)

    @classmethod
    def with_examples(cls) -> "ExpenseStore":
        """Store seeded with the three example expenses (next id is 4)."""
        return cls(EXAMPLE_EXPENSES)

    @property
    def next_id(self) -> int:
        return self._next_id

    def __len__(self) -> int:
        return len(self._expenses)

    def list(self) -> List[Expense]:
        """Returns all expenses in insertion order. The returned list is a copy."""
        return list(self._expenses)

    def append(self, new_expense: NewExpense) -> Expense:
        expense = Expense.from_new(self._next_id, new_expense)
        self._next_id += 1
        self._expenses.append(expense)
        logger.debug(f"Stored expense id={expense.id}; next id is {self._next_id}.")
        return expense
