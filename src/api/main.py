"""
WildWatch - REST API

FastAPI application for community wildlife reports: submission with
optional photo, listing, nearby search and the discussion board.

Run with: uvicorn src.api.main:app --reload
"""

import logging
import math
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional, List

from fastapi import FastAPI, Query, File, UploadFile, Form, Cookie, Depends, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, Response
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException

from src.auth.session import SessionVerifier
from src.core.config import settings
from src.core.exceptions import (
    WildWatchError,
    InvalidArgument,
    NotFound,
    StoreUnavailable,
)
from src.core.geo_utils import GeoPoint
from src.core.logging import setup_logging
from src.crowdsource.discussion import DiscussionBoard
from src.crowdsource.image_store import ImageStore
from src.crowdsource.report_handler import ReportHandler
from src.database.connection import get_db
from src.database.models import animal_key_for
from src.database.stores import DiscussionStore, ReportFilter, ReportStore, UserStore
from src.geo.proximity import GeoProximityQuery, ProximityQuery

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    get_db()
    ImageStore()
    logger.info(f"WildWatch API {API_VERSION} ready ({settings.app_env})")
    yield


# FastAPI app
app = FastAPI(
    title="WildWatch",
    description="Community wildlife incident reports with nearby search and discussion board",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Pydantic Models
# ============================================================================

class HealthResponse(BaseModel):
    """API health check response."""
    status: str
    version: str
    database: bool
    timestamp: str


class ReportResponse(BaseModel):
    """Single wildlife report."""
    report_id: int
    user_id: Optional[str] = None
    location_lat: Optional[float] = None
    location_lon: Optional[float] = None
    location_name: Optional[str] = None
    severity: int
    animal_type: str
    description: str
    date_reported: str
    date_created: Optional[str] = None
    image_exists: bool = False
    image: Optional[str] = Field(default=None, description="data:image/jpeg;base64 URI")


class ReportCreatedResponse(BaseModel):
    message: str
    report_id: int


class ReportPageResponse(BaseModel):
    """One page of reports."""
    reports: List[ReportResponse]
    hasMore: bool
    page: int
    totalPages: int


class ReportListResponse(BaseModel):
    reports: List[ReportResponse]


class NearbyReportResponse(ReportResponse):
    distance_miles: float


class SearchCenter(BaseModel):
    lat: float
    lon: float


class NearbyResponse(BaseModel):
    """Reports within the search radius, closest first."""
    reports: List[NearbyReportResponse]
    search_center: SearchCenter
    search_radius_miles: float
    total_found: int


class PostData(BaseModel):
    title: Optional[str] = None
    message: Optional[str] = None


class PostCreateRequest(BaseModel):
    """Request to create a discussion post."""
    postData: Optional[PostData] = None


class PostResponse(BaseModel):
    """Single discussion post."""
    post_id: int
    user_id: str
    title: str
    message: str
    date_created: Optional[str] = None


class PostCreatedResponse(BaseModel):
    message: str
    post_id: int


class PostPageResponse(BaseModel):
    posts: List[PostResponse]
    hasMore: bool


# ============================================================================
# Error Handling
# ============================================================================

@app.exception_handler(InvalidArgument)
async def invalid_argument_handler(request: Request, exc: InvalidArgument):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)})


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": str(exc)})


@app.exception_handler(StoreUnavailable)
async def store_unavailable_handler(request: Request, exc: StoreUnavailable):
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


@app.exception_handler(WildWatchError)
async def wildwatch_error_handler(request: Request, exc: WildWatchError):
    logger.error(f"{request.method} {request.url.path} failed: {exc!r}")
    return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request parameters", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


# ============================================================================
# Helper Functions
# ============================================================================

def get_report_handler() -> ReportHandler:
    return ReportHandler(ReportStore(get_db()), ImageStore(), page_size=settings.page_size)


def get_proximity_query() -> GeoProximityQuery:
    return GeoProximityQuery(ReportStore(get_db()))


def get_discussion_board() -> DiscussionBoard:
    return DiscussionBoard(DiscussionStore(get_db()), page_size=settings.page_size)


def get_session_verifier() -> SessionVerifier:
    return SessionVerifier(UserStore(get_db()))


def require_user(
    auth_token: Optional[str] = Cookie(None),
    user_id: Optional[str] = Cookie(None, alias="userId"),
    verifier: SessionVerifier = Depends(get_session_verifier),
) -> str:
    """Authenticated user id from the auth_token/userId cookies, or 401."""
    if not auth_token or not user_id or not verifier.check(user_id, auth_token):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return user_id


def _parse_int(value: Optional[str]) -> Optional[int]:
    """Lenient integer parsing for query strings; None when absent or malformed."""
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _parse_coordinate(value: Optional[str]) -> float:
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        raise InvalidArgument("Invalid or missing lat/lon coordinates") from None
    if math.isnan(parsed):
        raise InvalidArgument("Invalid or missing lat/lon coordinates")
    return parsed


def _parse_page(value: Optional[str]) -> int:
    page = _parse_int(value)
    if page is None or page < 1:
        raise InvalidArgument("Invalid page number")
    return page


def _report_filter(animal_type: Optional[str], severity: Optional[int]) -> ReportFilter:
    return ReportFilter(animal_type=animal_key_for(animal_type), severity=severity)


# ============================================================================
# System Routes
# ============================================================================

@app.get("/", response_class=HTMLResponse, tags=["System"])
async def root():
    """Welcome page."""
    return (
        "This is the backend service for WildWatch. "
        'Visit the documentation at <a href="/docs">/docs</a> for more information.'
    )


@app.get("/health", response_model=HealthResponse, tags=["System"])
def health_check():
    """Check API health status."""
    return HealthResponse(
        status="OK",
        version=API_VERSION,
        database=get_db().check_connection(),
        timestamp=datetime.utcnow().isoformat(),
    )


# ============================================================================
# Report Routes
# ============================================================================

@app.post(
    "/reports/create",
    response_model=ReportCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Reports"],
)
def create_report(
    severity: Optional[int] = Form(None),
    animal_type: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    date_reported: Optional[str] = Form(None),
    location_lat: Optional[float] = Form(None),
    location_lon: Optional[float] = Form(None),
    location_name: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    user_id: Optional[str] = Cookie(None, alias="userId"),
    handler: ReportHandler = Depends(get_report_handler),
):
    """
    Submit a wildlife report.

    Location is optional. The photo, if any, is converted to JPEG and can be
    fetched later from /reports/image/{report_id}. Anonymous reports are
    accepted; the userId cookie is recorded when present.
    """
    image_data = None
    if image is not None and image.filename:
        if image.content_type and not image.content_type.startswith("image/"):
            raise InvalidArgument("Only image files are allowed")
        image_data = image.file.read(settings.max_upload_bytes + 1)
        if len(image_data) > settings.max_upload_bytes:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail="Image exceeds upload size limit",
            )

    report = handler.create_report(
        severity=severity,
        animal_type=animal_type,
        description=description,
        date_reported=date_reported,
        location_lat=location_lat,
        location_lon=location_lon,
        location_name=location_name,
        user_id=user_id,
        image_data=image_data or None,
    )

    return ReportCreatedResponse(message="Report created successfully", report_id=report.report_id)


@app.get("/reports/get/{report_id}", response_model=ReportResponse, tags=["Reports"])
def get_report(report_id: int, handler: ReportHandler = Depends(get_report_handler)):
    """Get a specific report by ID, with its photo inlined."""
    report = handler.get_report(report_id)
    return handler.serialize(report)


@app.get("/reports/page", response_model=ReportPageResponse, tags=["Reports"])
def get_report_page(
    page: Optional[str] = Query(None, description="1-based page number"),
    animal_type: Optional[str] = Query(None, description="Case-insensitive animal filter"),
    severity: Optional[int] = Query(None),
    handler: ReportHandler = Depends(get_report_handler),
):
    """Ten reports per page, newest first."""
    result = handler.get_page(_parse_page(page), _report_filter(animal_type, severity))

    return ReportPageResponse(
        reports=[r.to_dict() for r in result.items],
        hasMore=result.has_more,
        page=result.page,
        totalPages=result.total_pages,
    )


@app.get("/reports/latest", response_model=ReportListResponse, tags=["Reports"])
def get_latest_reports(
    report_count: Optional[str] = Query(None, description="1-100, default 10"),
    animal_type: Optional[str] = Query(None),
    severity: Optional[int] = Query(None),
    handler: ReportHandler = Depends(get_report_handler),
):
    """Most recent reports."""
    reports = handler.get_latest(_parse_int(report_count), _report_filter(animal_type, severity))
    return ReportListResponse(reports=[r.to_dict() for r in reports])


@app.get("/reports/nearby", response_model=NearbyResponse, tags=["Reports"])
def get_nearby_reports(
    lat: Optional[str] = Query(None, description="Latitude of the search center"),
    lon: Optional[str] = Query(None, description="Longitude of the search center"),
    report_count: Optional[str] = Query(None, description="1-100, default 50"),
    animal_type: Optional[str] = Query(None),
    severity: Optional[int] = Query(None),
    finder: GeoProximityQuery = Depends(get_proximity_query),
):
    """
    Reports within half a mile of a point, closest first.

    An out-of-range report_count falls back to 50.
    """
    query = ProximityQuery(
        center=GeoPoint(latitude=_parse_coordinate(lat), longitude=_parse_coordinate(lon)),
        animal_type=animal_type or None,
        severity=severity,
        report_count=_parse_int(report_count),
        radius_miles=settings.nearby_radius_miles,
    )
    return finder.find(query).to_dict()


@app.get("/reports/personal", response_model=ReportListResponse, tags=["Reports"])
def get_personal_reports(
    user_id: str = Depends(require_user),
    handler: ReportHandler = Depends(get_report_handler),
):
    """Reports submitted by the signed-in user."""
    reports = handler.get_personal_reports(user_id)
    return ReportListResponse(reports=[handler.serialize(r) for r in reports])


@app.get("/reports/download", tags=["Reports"])
def download_reports(handler: ReportHandler = Depends(get_report_handler)):
    """Every report as a gzip-compressed JSON file."""
    return Response(
        content=handler.export_gzip(),
        media_type="application/json",
        headers={
            "Content-Encoding": "gzip",
            "Content-Disposition": 'attachment; filename="reports.json.gz"',
        },
    )


@app.get("/reports/image/{report_id}", tags=["Reports"])
def get_report_image(report_id: str, handler: ReportHandler = Depends(get_report_handler)):
    """Raw JPEG photo for a report."""
    if not report_id.isdigit():
        raise InvalidArgument("Invalid report ID")
    return Response(content=handler.get_image(int(report_id)), media_type="image/jpeg")


# ============================================================================
# Discussion Routes
# ============================================================================

@app.post(
    "/discussion/create",
    response_model=PostCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Discussion"],
)
def create_post(
    request: PostCreateRequest,
    user_id: str = Depends(require_user),
    board: DiscussionBoard = Depends(get_discussion_board),
):
    """Publish a discussion post (signed-in users only)."""
    data = request.postData or PostData()
    post = board.create_post(user_id=user_id, title=data.title, message=data.message)
    return PostCreatedResponse(message="Post created successfully", post_id=post.post_id)


@app.get("/discussion/get", response_model=PostResponse, tags=["Discussion"])
def get_post(
    post_id: int = Query(..., description="Post ID"),
    board: DiscussionBoard = Depends(get_discussion_board),
):
    """Get a discussion post by ID."""
    return board.get_post(post_id).to_dict()


@app.get("/discussion/page", response_model=PostPageResponse, tags=["Discussion"])
def get_post_page(
    page: Optional[str] = Query(None, description="1-based page number"),
    board: DiscussionBoard = Depends(get_discussion_board),
):
    """Ten posts per page, newest first."""
    result = board.get_page(_parse_page(page))
    return PostPageResponse(
        posts=[p.to_dict() for p in result.items],
        hasMore=result.has_more,
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
