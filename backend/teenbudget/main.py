# teenbudget/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from teenbudget.api.v1 import auth, budgets, categories, dashboard, health, savings_goal, transactions
from teenbudget.core.config import settings
from teenbudget.core.errors import register_exception_handlers

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Teen Budget API", version="0.1.0")

app.add_middleware(
  CORSMiddleware,
  allow_origins=settings.CORS_ORIGINS,
  allow_credentials=True,
  allow_methods=["*"],
  allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(health.router, prefix="/api/v1")
app.include_router(auth.router, prefix="/api/v1/auth", tags=["auth"])
app.include_router(transactions.router, prefix="/api/v1/transactions")
app.include_router(categories.router, prefix="/api/v1/categories")
app.include_router(budgets.router, prefix="/api/v1/budgets")
app.include_router(dashboard.router, prefix="/api/v1/dashboard")
app.include_router(savings_goal.router, prefix="/api/v1/savings-goal")

@app.get("/")
def root():
    return {"message": "Teen Budget API - visit /api/v1/health"}
