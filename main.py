from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from taskforge.core.config import settings
from taskforge.core.exceptions import AppError
from taskforge.core.logging_config import logger
from taskforge.database import Database
from taskforge.routers import auth, tenants, users, projects, tasks


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Tests install their own Database before the app starts
    if getattr(app.state, "database", None) is None:
        app.state.database = Database(settings.DATABASE_URL)
    logger.info(f"TaskForge API starting: environment={settings.ENVIRONMENT}")
    yield
    app.state.database.dispose()


app = FastAPI(
    title="TaskForge API",
    version="1.0.0",
    redirect_slashes=False,  # Disable automatic redirects to prevent POST data loss
    lifespan=lifespan,
)

# Configure CORS for the frontend application
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        details.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return error_response(status.HTTP_400_BAD_REQUEST, f"Validation error: {'; '.join(details)}")


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return error_response(exc.status_code, "Route not found")
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


# Include routers
app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(tenants.router, prefix="/api/tenants", tags=["Tenants"])
app.include_router(users.router, prefix="/api", tags=["Users"])
app.include_router(projects.router, prefix="/api/projects", tags=["Projects"])
app.include_router(tasks.router, prefix="/api", tags=["Tasks"])


@app.get("/")
def root():
    return {"message": "TaskForge API is running"}


@app.get("/api/health")
def health_check(request: Request):
    try:
        request.app.state.database.ping()
    except Exception as e:
        logger.error(f"Health check failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service unhealthy"
        )
    return {"success": True, "data": {"status": "ok", "database": "connected"}}
