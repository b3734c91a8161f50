"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the study-planner backend.
Controllers are intentionally thin: they accept requests, delegate to
services, and map `errors.StudyPlannerError` subclasses to JSON error
responses.

Endpoints implemented:
- POST /api/register
- POST /api/login
- GET /api/user
- GET /api/users/{user_id}
- PUT /api/user/settings
- PUT /api/user/target-date
- POST /api/plans
- PUT /api/plans
- GET /api/health
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List
import json
import logging
import time
import uuid

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from sqlmodel import Session

from . import models, services
from .auth import get_current_user
from .config import settings
from .database import get_session, supervisor
from .errors import CorsRejected, StudyPlannerError
from .schemas import LoginIn, RegisterIn, SettingsIn, StudyPlanIn, TargetDateIn

logger = logging.getLogger("study_planner.api")
if not logger.handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # connection retries run in the background; requests are served meanwhile
    supervisor.start()
    yield
    supervisor.dispose()


app = FastAPI(title="Study Planner API", lifespan=lifespan)

# Cross-cutting middleware is registered before the routes. Starlette runs
# the most recently added middleware first, so the order below is:
# request logging -> CORS allow-list check -> CORS headers -> routes.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.middleware("http")
async def cors_allowlist_middleware(request: Request, call_next):
    origin = request.headers.get("origin")
    if origin and origin not in settings.ALLOWED_ORIGINS:
        exc = CorsRejected(origin, settings.ALLOWED_ORIGINS)
        logger.warning("cors_rejected origin=%s path=%s", origin, request.url.path)
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": str(exc), "allowedOrigins": exc.allowed},
        )
    return await call_next(request)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    response: Response
    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
        logger.exception(
            "request_failed %s",
            json.dumps(
                {
                    "request_id": req_id,
                    "path": request.url.path,
                    "method": request.method,
                    "duration_ms": elapsed_ms,
                    "client": request.client.host if request.client else "unknown",
                },
                ensure_ascii=True,
            ),
        )
        raise
    response.headers["X-Request-ID"] = req_id
    elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
    logger.info(
        "request_done %s",
        json.dumps(
            {
                "request_id": req_id,
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "duration_ms": elapsed_ms,
                "client": request.client.host if request.client else "unknown",
            },
            ensure_ascii=True,
        ),
    )
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report malformed or incomplete bodies as 400 instead of FastAPI's 422."""
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request body", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Last-resort handler; the underlying error text is logged, never returned."""
    logger.exception("unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    req_id = getattr(request.state, "request_id", None)
    headers = {"X-Request-ID": req_id} if req_id else None
    return JSONResponse(status_code=500, content={"detail": "Internal server error"}, headers=headers)


@app.post('/api/register', status_code=201)
def register(payload: RegisterIn, db: Session = Depends(get_session)):
    """Register a new user and return the profile plus a session token.

    Fails with 400 when a field is missing or the email is already taken.
    """
    auth = services.AuthService(db)
    try:
        user, token = auth.register(payload.name, payload.email, payload.password)
    except StudyPlannerError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    logger.info("user_registered id=%s", user.id)
    return {'user': services.user_profile(user), 'token': token}


@app.post('/api/login')
def login(payload: LoginIn, db: Session = Depends(get_session)):
    """Authenticate a user and return a 7-day JWT token.

    The token contains `user_id` and is signed with the configured
    secret.
    """
    auth = services.AuthService(db)
    try:
        user, token = auth.authenticate(payload.email, payload.password)
    except StudyPlannerError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {'user': services.user_summary(user), 'token': token}


@app.get('/api/user')
def get_user(user: models.User = Depends(get_current_user)):
    """Return the authenticated user's profile, study plans included."""
    return services.user_profile(user)


@app.get('/api/users/{user_id}')
def get_user_by_id(user_id: str, db: Session = Depends(get_session), user: models.User = Depends(get_current_user)):
    """Return a stored user document (password excluded).

    Other users' documents are only visible when
    `ALLOW_CROSS_USER_LOOKUP` is enabled.
    """
    svc = services.UserService(db, allow_cross_user_lookup=settings.ALLOW_CROSS_USER_LOOKUP)
    try:
        found = svc.get_document(user, user_id)
    except StudyPlannerError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return services.user_document(found)


@app.put('/api/user/settings')
def update_settings(payload: SettingsIn, db: Session = Depends(get_session), user: models.User = Depends(get_current_user)):
    """Update name and/or avatar; omitted fields are left unchanged."""
    svc = services.UserService(db)
    user = svc.update_settings(user, name=payload.name, avatar=payload.avatar)
    return {'message': 'Settings updated', 'user': services.user_summary(user)}


@app.put('/api/user/target-date')
def update_target_date(payload: TargetDateIn, db: Session = Depends(get_session), user: models.User = Depends(get_current_user)):
    """Set (or clear, with null) the user's target date."""
    svc = services.UserService(db)
    user = svc.update_target_date(user, payload.target_date)
    return {
        'message': 'Target date updated',
        'targetDate': user.target_date.isoformat() if user.target_date else None,
    }


@app.post('/api/plans', status_code=201)
def create_plan(plan: StudyPlanIn, db: Session = Depends(get_session), user: models.User = Depends(get_current_user)):
    """Append one study plan and return the full updated list."""
    svc = services.PlanService(db)
    try:
        return svc.add_plan(user, plan)
    except StudyPlannerError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@app.put('/api/plans')
def replace_plans(plans: List[StudyPlanIn], db: Session = Depends(get_session), user: models.User = Depends(get_current_user)):
    """Replace the whole study plan list with the submitted array."""
    svc = services.PlanService(db)
    try:
        study_plans = svc.replace_plans(user, plans)
    except StudyPlannerError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {'message': 'Study plans updated', 'studyPlans': study_plans}


@app.get('/api/health')
def health():
    """Lightweight health check for uptime monitoring."""
    return {
        'status': 'OK',
        'dbState': int(supervisor.state),
        'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
        'environment': settings.ENV,
    }
