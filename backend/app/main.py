# backend/app/main.py
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from backend.app.api.assistant import router as assistant_router
from backend.app.api.categorize import router as categorize_router
from backend.app.api.rules import router as rules_router
from inbox_triage.config.logging_setup import configure_logging
from inbox_triage.config.settings import LOG_LEVEL, ping_message

configure_logging(LOG_LEVEL)

app = FastAPI(title="inbox-triage API")
app.include_router(categorize_router, prefix="/api")
app.include_router(rules_router, prefix="/api")
app.include_router(assistant_router, prefix="/api")


@app.exception_handler(HTTPException)
async def http_error_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    # Clients expect {"error": ...} rather than FastAPI's {"detail": ...}.
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.get("/api/ping")
def ping() -> dict:
    return {"message": ping_message()}
