"""Pydantic models for expense data"""
from pydantic import BaseModel, Field, JsonValue


class NewExpense(BaseModel):
    """
    A validated expense that has not been stored yet.
    description, category and date are kept exactly as submitted.
    """
    amount: str = Field(..., description="Amount as a fixed two-decimal string, e.g. '42.50'.")
    description: JsonValue
    category: JsonValue
    date: JsonValue = Field(..., description="Expected in YYYY-MM-DD format; not validated.")

    model_config = {"frozen": True}


class Expense(BaseModel):
    """
    A stored expense record. The id is assigned by the store and never reused.
    """
    id: int = Field(..., gt=0)
    amount: str
    description: JsonValue
    category: JsonValue
    date: JsonValue

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "example": {
                "id": 4,
                "amount": "42.50",
                "description": "Book",
                "category": "Leisure",
                "date": "2023-12-05",
            }
        },
    }

    @classmethod
    def from_new(cls, expense_id: int, new_expense: NewExpense) -> "Expense":
        return cls(id=expense_id, **new_expense.model_dump())
