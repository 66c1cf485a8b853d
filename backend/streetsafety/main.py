import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from streetsafety.core.config import get_settings
from streetsafety.core.exceptions import StreetSafetyError, ValidationError
from streetsafety.api import api_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.create_tables_on_startup:
        from streetsafety.db.session import init_db

        init_db()
        logger.info("Database tables ready")
    yield


app = FastAPI(
    title="Street Safety API",
    description="""
    ## Street Safety API

    Report street crime with its location, browse reports on a map and vote on how credible they are.

    ### Features

    * **Reports**: Submit crime reports; severity is derived from the crime type
    * **Votes**: One up or down vote per user per report, feed sorted by upvotes
    * **Proximity**: Nearest report to a position, or alerts for every report within a radius
    * **Realtime**: Radius alerts over WebSocket while the user moves

    ### API Endpoints

    * `/api/health` - Service health check
    * `/api/register`, `/api/login` - User accounts
    * `/api/crimes` - Crime reports and votes
    * `/api/crimes/nearby` - Proximity evaluation
    * `/api/realtime/alerts` - Real-time proximity alerts (WebSocket)
    """,
    version="1.0.0",
    openapi_tags=[
        {
            "name": "Health",
            "description": "Service health and status",
        },
        {
            "name": "Accounts",
            "description": "User registration and login",
        },
        {
            "name": "Crimes",
            "description": "Crime reports - submission, listing, votes and proximity",
        },
        {
            "name": "Realtime",
            "description": "Real-time proximity alerts over WebSocket",
        },
    ],
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StreetSafetyError)
async def street_safety_error_handler(request: Request, exc: StreetSafetyError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=int(exc.status_code), content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies and parameters are client errors like any other ValidationError."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(location) or None
    if field:
        message = f"Invalid '{field}': {first.get('msg', 'invalid value')}"
    else:
        message = "Invalid request"

    error = ValidationError(message, field=field)
    content = error.to_dict()
    content.setdefault("details", {})["errors"] = jsonable_encoder(errors)
    return JSONResponse(status_code=int(error.status_code), content=content)


# Include API router
app.include_router(api_router, prefix=settings.api_prefix)


@app.get(
    "/",
    summary="API root",
    description="Basic information about the API",
    tags=["Health"]
)
def root():
    return {
        "name": "Street Safety API",
        "version": "1.0.0",
        "status": "running",
        "docs": {
            "swagger": "/docs",
            "redoc": "/redoc",
            "openapi": "/openapi.json"
        }
    }
