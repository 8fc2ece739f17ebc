from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .logging_config import setup_logging, get_logger
from .routers.users import router as users_router
from .routers.transactions import router as transactions_router
from .routers.budgets import router as budgets_router

setup_logging()
logger = get_logger(__name__)


app = FastAPI(title="Expense Tracker API")


async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(f"Storage failure during {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.include_router(users_router)
app.include_router(transactions_router)
app.include_router(budgets_router)

app.add_exception_handler(SQLAlchemyError, storage_error_handler)


@app.get("/health")
def health():
    return {
        "status": "ok",
        "message": "Expense Tracker API is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
