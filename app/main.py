from fastapi import FastAPI
from .config import get_settings
from .database import init_db
from .log import configure_logging, get_logger
from .routers import users, groups, expenses, balances, debts, settlements, goals, revenues, reports

configure_logging()
settings = get_settings()

app = FastAPI(title=settings.app_name, version="1.0.0")

init_db()
get_logger(__name__).info("startup", database_url=settings.database_url)

app.include_router(users.router, prefix="/users", tags=["users"])
app.include_router(revenues.router, prefix="/users/{user_id}/revenues", tags=["revenues"])
app.include_router(groups.router, prefix="/groups", tags=["groups"])
app.include_router(expenses.router, prefix="/groups/{group_id}/expenses", tags=["expenses"])
app.include_router(balances.router, prefix="/groups/{group_id}/balances", tags=["balances"])
app.include_router(debts.router, prefix="/groups/{group_id}/debts", tags=["debts"])
app.include_router(settlements.router, prefix="/groups/{group_id}/settlements", tags=["settlements"])
app.include_router(goals.router, prefix="/groups/{group_id}/goals", tags=["goals"])
app.include_router(reports.router, prefix="/groups/{group_id}/reports", tags=["reports"])

@app.get("/")
def health():
    return {"status": "ok"}
