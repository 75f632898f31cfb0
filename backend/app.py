from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError as PydanticValidationError
from starlette.middleware.sessions import SessionMiddleware

from .auth.dependencies import require_user
from .auth.models import LoginRequest, SignupRequest
from .auth.users import DuplicateUserError, authenticate, create_user, public_user
from .errors import RecommendationError
from .llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from .logging_config import setup_logging
from .recommendations.config import DEFAULT_RECOMMENDATION_CONFIG, RecommendationConfig
from .recommendations.models import EnrichedPlace, RecommendationRequest
from .recommendations.service import get_recommendations
from .trips.models import (
    PlaceNameRequest,
    StartTripRequest,
    TripPlanState,
    TripRecommendRequest,
    TripStateResponse,
    VibeRequest,
)
from .trips.reducers import (
    VIBES,
    TripPlanError,
    choose_vibe,
    exclusions,
    saved_summary,
    select_day,
    select_place,
    start_trip,
    toggle_bookmark,
)

logger = logging.getLogger(__name__)

_STATIC_DIR = Path(__file__).resolve().parent / "static"
_TRIP_SESSION_KEY = "trip"


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    if not DEFAULT_LLM_CONFIG.api_key:
        logger.warning("GROQ_API_KEY is not set; /recommend will fail until it is configured")
    logger.info(
        "Recommendation policy: cardinality=%s on_malformed=%s require_user_location=%s",
        DEFAULT_RECOMMENDATION_CONFIG.cardinality_policy.value,
        DEFAULT_RECOMMENDATION_CONFIG.on_malformed.value,
        DEFAULT_RECOMMENDATION_CONFIG.require_user_location,
    )
    yield


app = FastAPI(title="Travel Itinerary Planner API", version="1.0.0", lifespan=lifespan)
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "trip-planner-secret-change-in-production"),
)


def get_llm_config() -> LLMConfig:
    return DEFAULT_LLM_CONFIG


def get_recommendation_config() -> RecommendationConfig:
    return DEFAULT_RECOMMENDATION_CONFIG


# ── Error handlers ───────────────────────────────────────────────────────


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(RecommendationError)
async def recommendation_error_handler(request: Request, exc: RecommendationError):
    if exc.status_code >= 500:
        logger.error(
            "%s %s failed: %s: %s",
            request.method,
            request.url.path,
            type(exc).__name__,
            exc.message,
            exc_info=exc,
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.public_message})


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/vibes")
def vibes() -> list[str]:
    return VIBES


@app.post(
    "/recommend",
    response_model=list[EnrichedPlace],
    response_model_exclude_none=True,
)
async def recommend(
    body: RecommendationRequest,
    response: Response,
    llm_config: LLMConfig = Depends(get_llm_config),
    config: RecommendationConfig = Depends(get_recommendation_config),
) -> list[EnrichedPlace]:
    result = await get_recommendations(body, llm_config, config)
    response.headers["X-Recommendation-Source"] = result.source
    return result.places


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/auth/signup", status_code=201)
def signup(body: SignupRequest) -> dict:
    try:
        record = create_user(body.username, body.email, body.password)
    except DuplicateUserError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return {"status": "created", "user": public_user(record)}


@app.post("/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.identifier, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    request.session.pop("user", None)
    return {"status": "logged_out"}


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return user


# ── Trip planning ────────────────────────────────────────────────────────


def _load_trip(request: Request) -> TripPlanState:
    raw = request.session.get(_TRIP_SESSION_KEY)
    if raw:
        try:
            return TripPlanState.model_validate(raw)
        except PydanticValidationError:
            logger.warning("Discarding unreadable trip state from session")
            request.session.pop(_TRIP_SESSION_KEY, None)
    raise HTTPException(status_code=404, detail="No active trip")


def _save_trip(request: Request, state: TripPlanState) -> TripStateResponse:
    request.session[_TRIP_SESSION_KEY] = state.model_dump(mode="json")
    return TripStateResponse(trip=state, summary=saved_summary(state))


def _apply(request: Request, reducer, *args) -> TripStateResponse:
    state = _load_trip(request)
    try:
        state = reducer(state, *args)
    except TripPlanError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return _save_trip(request, state)


@app.post("/trip", response_model=TripStateResponse, status_code=201)
def create_trip(body: StartTripRequest, request: Request) -> TripStateResponse:
    try:
        state = start_trip(body.city, body.start_date, body.end_date)
    except TripPlanError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return _save_trip(request, state)


@app.get("/trip", response_model=TripStateResponse)
def get_trip(request: Request) -> TripStateResponse:
    state = _load_trip(request)
    return TripStateResponse(trip=state, summary=saved_summary(state))


@app.delete("/trip")
def delete_trip(request: Request) -> dict:
    request.session.pop(_TRIP_SESSION_KEY, None)
    return {"status": "cleared"}


@app.post("/trip/days/{day_number}", response_model=TripStateResponse)
def trip_select_day(day_number: int, request: Request) -> TripStateResponse:
    return _apply(request, select_day, day_number)


@app.post("/trip/vibe", response_model=TripStateResponse)
def trip_choose_vibe(body: VibeRequest, request: Request) -> TripStateResponse:
    return _apply(request, choose_vibe, body.vibe)


@app.post("/trip/places", response_model=TripStateResponse)
def trip_select_place(body: PlaceNameRequest, request: Request) -> TripStateResponse:
    return _apply(request, select_place, body.name)


@app.post("/trip/bookmarks", response_model=TripStateResponse)
def trip_toggle_bookmark(body: PlaceNameRequest, request: Request) -> TripStateResponse:
    return _apply(request, toggle_bookmark, body.name)


@app.post(
    "/trip/recommend",
    response_model=list[EnrichedPlace],
    response_model_exclude_none=True,
)
async def trip_recommend(
    body: TripRecommendRequest,
    request: Request,
    response: Response,
    llm_config: LLMConfig = Depends(get_llm_config),
    config: RecommendationConfig = Depends(get_recommendation_config),
) -> list[EnrichedPlace]:
    state = _load_trip(request)
    if body.vibe:
        try:
            state = choose_vibe(state, body.vibe)
        except TripPlanError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
    if not state.current_vibe:
        raise HTTPException(status_code=400, detail="Choose a vibe first")
    _save_trip(request, state)

    visited, selected, bookmarked = exclusions(state)
    rec_request = RecommendationRequest(
        city=state.city,
        radius=body.radius,
        vibes=[state.current_vibe],
        visited=visited,
        selected=selected,
        bookmarked=bookmarked,
        user_location=body.user_location,
    )
    result = await get_recommendations(rec_request, llm_config, config)
    response.headers["X-Recommendation-Source"] = result.source
    return result.places


# ── Static UI ────────────────────────────────────────────────────────────


app.mount("/static", StaticFiles(directory=str(_STATIC_DIR)), name="static")


@app.get("/")
def root():
    return FileResponse(str(_STATIC_DIR / "index.html"))
