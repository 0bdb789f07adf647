# teenbudget.api.v1 package - routers mounted under /api/v1 by teenbudget.main
from . import auth, budgets, categories, dashboard, health, savings_goal, transactions

__all__ = ["auth", "budgets", "categories", "dashboard", "health", "savings_goal", "transactions"]
