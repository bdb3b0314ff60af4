import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException, Depends, Security, status
from fastapi.security import APIKeyHeader
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from database import db
from routes.driver_routes import router as driver_router
from routes.tractor_routes import router as tractor_router
from routes.trailer_routes import router as trailer_router
from routes.service_routes import router as service_router
from routes.trip_routes import router as trip_router
from routes.stop_routes import router as stop_router
from routes.statistics_routes import router as statistics_router
from routes.user_routes import router as user_router
from routes.document_requirement_routes import router as document_requirement_router
from services.document_requirements import get_requirement_table

# Configure logging based on settings
Path(settings.log_file).parent.mkdir(parents=True, exist_ok=True)
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(settings.log_file),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)

# API Key Authentication
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def verify_api_key(api_key: Optional[str] = Security(api_key_header)):
    """Verify API key for authentication.

    Args:
        api_key: The API key from the X-API-Key header

    Returns:
        True if authentication successful

    Raises:
        HTTPException: If API key is invalid or missing
    """
    if not settings.api_key:  # If no API key is set, allow all requests (dev mode)
        return True
    if not api_key or api_key != settings.api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key"
        )
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - startup and shutdown events."""
    # Startup
    logger.info("Starting Ruta Control API...")
    if not db.verify_connectivity():
        logger.warning("Cannot connect to Neo4j database")
    else:
        logger.info("Successfully connected to Neo4j database")

    # Fail at startup rather than on the first trip evaluation
    get_requirement_table()

    yield

    # Shutdown
    logger.info("Shutting down Ruta Control API...")
    db.close()


tags_metadata = [
    {
        "name": "health",
        "description": "Health check endpoints for monitoring API status",
    },
    {
        "name": "drivers",
        "description": "Drivers (choferes) and their license expiry",
    },
    {
        "name": "tractors",
        "description": "Tractor units, RTO expiry and plate checks",
    },
    {
        "name": "trailers",
        "description": "Trailers (semirremolques) and the service-specific documents they carry",
    },
    {
        "name": "services",
        "description": "Transport services and the trailer documents each one requires",
    },
    {
        "name": "trips",
        "description": "Trip creation and editing: resource availability, eligibility on the departure date, submission",
    },
    {
        "name": "stops",
        "description": "Starting trips, recording stops and arrivals, finalizing",
    },
    {
        "name": "statistics",
        "description": "Trip and kilometre statistics for the dashboard",
    },
    {
        "name": "users",
        "description": "Application users and their roles",
    },
    {
        "name": "document-requirements",
        "description": "The document requirement table per service type",
    },
]

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="""
    ## Overview
    Ruta Control manages a transport company's fleet: drivers, tractors and
    trailers, the documents each must keep current, and the trips they are
    assigned to.

    ## Features
    - **Document expiry tracking**: License, RTO and trailer inspections per service type
    - **Trip eligibility**: Documents are checked against the trip's departure date
    - **Trip tracking**: Stops with odometer readings from origin to last arrival
    - **Statistics**: Trips and kilometres per driver, tractor and service

    ## Authentication
    Use the `X-API-Key` header for authentication. When role enforcement is
    enabled, send the caller's role in `X-Role-Id`.
    """,
    version=settings.app_version,
    lifespan=lifespan,
    openapi_tags=tags_metadata,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    debug=settings.debug
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health check endpoint (no auth required)
@app.get("/health",
         tags=["health"],
         summary="Health Check",
         description="Check the health status of the API and database connectivity",
         response_description="Health status information")
async def health_check():
    """Check API and database health status.

    Returns:
        dict: Health status with API status, database status, and version
    """
    db_status = "healthy" if db.verify_connectivity() else "unhealthy"
    return {
        "status": "healthy",
        "database": db_status,
        "version": settings.app_version
    }


@app.get("/",
         summary="API Information",
         description="Get basic information about the Ruta Control API",
         response_description="API metadata")
async def root():
    """Get basic API information.

    Returns:
        dict: API name, version, and documentation URL
    """
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "documentation": "/docs"
    }


# Include routers with authentication
for router in (
    driver_router,
    tractor_router,
    trailer_router,
    service_router,
    trip_router,
    stop_router,
    statistics_router,
    user_router,
    document_requirement_router,
):
    app.include_router(router, dependencies=[Depends(verify_api_key)])


# Error handlers
@app.exception_handler(404)
async def not_found_handler(request, exc):
    """Handle 404 Not Found errors.

    Args:
        request: The incoming request
        exc: The exception that was raised
    """
    # If it's an HTTPException with a detail, preserve it
    if hasattr(exc, 'detail'):
        return JSONResponse(
            status_code=404,
            content={"detail": exc.detail}
        )
    return JSONResponse(
        status_code=404,
        content={"error": "Resource not found", "path": str(request.url)}
    )


@app.exception_handler(500)
async def internal_error_handler(request, exc):
    """Handle 500 Internal Server errors.

    Args:
        request: The incoming request
        exc: The exception that was raised
    """
    logger.error(f"Internal server error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"}
    )
