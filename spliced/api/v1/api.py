from fastapi import APIRouter
from spliced.api.v1.endpoints import groups, expenses, settlements

api_router = APIRouter()

api_router.include_router(groups.router)
api_router.include_router(expenses.router)
api_router.include_router(settlements.router)
