from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from typing import Optional
from pydantic import ValidationError
from models import ErrorResponse, HealthResponse, RunRequest
import logging
from dotenv import load_dotenv

# Load environment variables before the execution config is read
load_dotenv()

from execution import get_execution_service  # noqa: E402
from execution.config import CORS_ORIGINS, HOST, MAX_BODY_SIZE, PORT  # noqa: E402

"""
FastAPI server for code execution
Compiles/interprets submitted code and returns its captured output
"""

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"
SIZE_LIMIT_MESSAGE = "File size limit exceeded. Maximum allowed size is 1MB."
MISSING_FIELDS_MESSAGE = "Language and code are required"

app = FastAPI(
    title="Code Runner",
    description="Runs C, C++, Java and Python submissions under a time limit",
    version=VERSION
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_response(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
    body = ErrorResponse(error=error, details=details).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content=body)


@app.middleware("http")
async def limit_body_size(request: Request, call_next):
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > MAX_BODY_SIZE:
        logger.info(f"Rejected {request.method} {request.url.path}: body of {content_length} bytes")
        return error_response(413, SIZE_LIMIT_MESSAGE)
    return await call_next(request)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"Incoming request: {request.method} {request.url.path}")
    return await call_next(request)


@app.exception_handler(Exception)
async def unhandled_exception(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
    return error_response(500, "Something went wrong!")


@app.get("/")
async def root():
    return {"message": "hello world"}


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint
    Returns the service status and supported languages
    """
    return HealthResponse(status="ok", version=VERSION, languages=get_execution_service().languages)


@app.post("/run")
async def run_code(request: Request):
    """
    Execute user-submitted code

    Example:
        POST /run
        {
            "language": "python",
            "code": "print(input())",
            "inputData": "hi"
        }

    Returns:
        {"success": true, "output": "..."} or {"success": false, "error": "..."}
    """
    body = await request.body()
    if len(body) > MAX_BODY_SIZE:
        return error_response(413, SIZE_LIMIT_MESSAGE)

    try:
        payload = RunRequest.model_validate_json(body or b"{}")
    except ValidationError:
        return error_response(400, MISSING_FIELDS_MESSAGE)

    if not payload.language or not payload.code:
        return error_response(400, MISSING_FIELDS_MESSAGE)

    try:
        result = await get_execution_service().execute(
            payload.language,
            payload.code,
            payload.inputData or ""
        )
    except Exception as e:
        logger.error(f"Error executing code: {e}", exc_info=True)
        return error_response(500, "Server error", details=str(e))

    return result.to_response()


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting code runner on port {PORT}")
    uvicorn.run(
        "main:app",
        host=HOST,
        port=PORT,
        log_level="info",
        access_log=True
    )
