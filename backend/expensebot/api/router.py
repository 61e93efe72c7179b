"""
Main API router that includes all route modules.
"""
from fastapi import APIRouter
from expensebot.api.routes import budget, expenses, interactions, summary

api_router = APIRouter()

# Include all route modules
api_router.include_router(expenses.router)
api_router.include_router(summary.router)
api_router.include_router(budget.router)
api_router.include_router(interactions.router)
