import os
import logging
from dotenv import load_dotenv

load_dotenv('app/.env')

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn
import db
from middlewares.timing import TimingMiddleware
from routes import attendance, auth, classes, reports, students, users
from utils.jwt import JWT_SECRET

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",") if origin.strip()]

app = FastAPI(title="Absen Digital API", version="1.0.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(TimingMiddleware)

for module in (auth, users, classes, students, attendance, reports):
    app.include_router(module.router, prefix="/api/v1")

MISSING_ERRORS = {"missing", "string_too_short", "list_too_short"}


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(_: Request, exc: StarletteHTTPException):
    if isinstance(exc.detail, dict):
        content = {"success": False, **exc.detail}
    else:
        content = {"success": False, "error": exc.detail if isinstance(exc.detail, str) else "Request failed"}
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_: Request, exc: RequestValidationError):
    errors = exc.errors()
    if any(error.get("type") in MISSING_ERRORS or error.get("input") == "" for error in errors):
        message = "Missing required fields"
    else:
        first_error = errors[0] if errors else {}
        field = ".".join(str(part) for part in first_error.get("loc", ())[1:])
        message = first_error.get("msg", "Validation error")
        if field:
            message = f"{field}: {message}"
    return JSONResponse(status_code=400, content={"success": False, "error": message})


@app.exception_handler(Exception)
async def unhandled_exception_handler(_: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})


@app.on_event("startup")
def startup_event():
    if JWT_SECRET == "secret":
        logger.warning("JWT_SECRET is using the default value; set it in production")
    if os.getenv("DB_AUTO_CREATE", "false").lower() == "true":
        db.create_db_and_tables()
    db.seed_default_admin()


@app.get("/api/ping")
async def ping():
    return {"status": "ok"}


if __name__ == "__main__":
    server_address = os.getenv("SERVER_ADDRESS", "0.0.0.0:8080")
    host, port = server_address.split(":")
    uvicorn.run(app=app, host=host, port=int(port))
