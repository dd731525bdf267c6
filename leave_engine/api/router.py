from fastapi import APIRouter

from leave_engine.api.balances import person_balance_router
from leave_engine.api.reports import reports_router
from leave_engine.api.submissions import submissions_router

api_router = APIRouter()
api_router.include_router(submissions_router)
api_router.include_router(person_balance_router)
api_router.include_router(reports_router)
