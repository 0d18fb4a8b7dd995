"""API Routes for expenses"""
from fastapi import APIRouter, Depends, HTTPException, Request
from typing import Annotated, List
from services import expenses_service
from services.expense_store import ExpenseStore
from models.expense import Expense
from utils.errors import MethodNotAllowed
import logging

router = APIRouter()
logger = logging.getLogger(__name__)

# Verbs with no handler on /expenses; OPTIONS is answered by the CORS middleware
UNSUPPORTED_METHODS = ["PUT", "PATCH", "DELETE", "HEAD"]

# --- Dependency Function ---
def get_expense_store(request: Request) -> ExpenseStore:
    """Dependency to get the in-memory expense store from the application state."""
    store = getattr(request.app.state, "expense_store", None)
    if store is None:
        logger.error("Expense store not found in application state. Was the app built with create_app()?")
        raise HTTPException(status_code=503, detail="Expense store not available.")
    return store

# Type hint for the dependency
ExpenseStoreDep = Annotated[ExpenseStore, Depends(get_expense_store)]

# --- API Routes ---

@router.get("/expenses", response_model=List[Expense], summary="Get All Expenses", description="Retrieves all expense records, sorted by date descending (most recent first).")
async def get_expenses(store: ExpenseStoreDep) -> List[Expense]:
    logger.info("GET /expenses endpoint called.")
    return expenses_service.get_all_expenses(store)

@router.post("/expenses", response_model=Expense, status_code=201, summary="Add Expense", description="Validates a JSON expense (amount, description, category, date) and stores it.")
async def add_expense(request: Request, store: ExpenseStoreDep) -> Expense:
    """
    Reads the raw body itself so malformed JSON and missing fields are reported
    with this API's own error messages instead of FastAPI's validation errors.
    """
    logger.info("POST /expenses endpoint called.")
    payload = await expenses_service.read_json_body(request)
    return expenses_service.add_expense(store, payload)

@router.api_route("/expenses", methods=UNSUPPORTED_METHODS, include_in_schema=False)
async def method_not_allowed(request: Request):
    logger.warning(f"{request.method} /expenses rejected: method not allowed.")
    raise MethodNotAllowed(request.method)
