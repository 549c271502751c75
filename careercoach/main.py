import logging

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
import sentry_sdk

from careercoach.api.v1.health import router as health_router
from careercoach.api.v1.interview import router as interview_router
from careercoach.api.v1.quiz import router as quiz_router
from careercoach.api.v1.resume import router as resume_router
from careercoach.api.v1.skills import router as skills_router
from careercoach.api.v1.user import router as user_router
from careercoach.core.config import settings
from careercoach.core.cors import cors_allow_credentials, cors_allowed_origins
from careercoach.core.errors import CareerCoachError
from careercoach.core.lifespan import lifespan
from careercoach.core.rate_limit import limiter

load_dotenv()
logging.basicConfig(level=settings.log_level, format="%(message)s")
if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn)

logger = logging.getLogger(__name__)

app = FastAPI(title="Career Coach API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_allowed_origins(),
    allow_credentials=cors_allow_credentials(),
    allow_methods=["*"],
    allow_headers=["*"],
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)


@app.exception_handler(CareerCoachError)
async def career_coach_error_handler(request: Request, exc: CareerCoachError):
    if exc.status_code >= 500:
        logger.warning("request_failed path=%s status=%s: %s", request.url.path, exc.status_code, exc)
    return JSONResponse(status_code=exc.status_code, content={"message": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request", "error": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("request_unhandled_error path=%s", request.url.path)
    content = {"message": "Server error"}
    if settings.debug:
        content["error"] = str(exc)
    return JSONResponse(status_code=500, content=content)


app.include_router(health_router, prefix="/api", tags=["Health"])
app.include_router(quiz_router, prefix="/api", tags=["Quiz"])
app.include_router(interview_router, prefix="/api", tags=["Interview"])
app.include_router(user_router, prefix="/api", tags=["User"])
app.include_router(resume_router, prefix="/api", tags=["Resume"])
app.include_router(skills_router, prefix="/api", tags=["Skills"])
