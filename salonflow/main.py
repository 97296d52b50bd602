from contextlib import asynccontextmanager
from datetime import datetime
import logging

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables as early as possible
load_dotenv()

from .application.ports.sms_gateway import SmsGateway
from .config import settings
from .database import create_db_and_tables
from .dependencies import get_sms_gateway
from .exceptions import BookingFlowError, booking_error_handler, http_exception_handler, validation_exception_handler
from .middleware import ErrorHandlingMiddleware, LoggingMiddleware, SecurityMiddleware
from .routers import booking_router, otp_router, sms_router
from .schemas import ErrorResponse

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format=settings.LOG_FORMAT,
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting %s...", settings.APP_NAME)
    app.state.db_init_ok = True
    app.state.db_init_error = None
    try:
        create_db_and_tables()
        logger.info("Database initialized successfully")
    except Exception as e:
        # Do not crash the app; report via health endpoint
        app.state.db_init_ok = False
        app.state.db_init_error = str(e)
        logger.exception("Database initialization failed")
    if not get_sms_gateway().is_configured():
        logger.warning("SMS gateway not configured - OTPs and confirmations will not be delivered")
    yield
    logger.info("Shutting down %s...", settings.APP_NAME)


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
    docs_url=("/docs" if settings.DOCS_ENABLED else None),
    redoc_url=("/redoc" if settings.DOCS_ENABLED else None),
    openapi_url=("/openapi.json" if settings.DOCS_ENABLED else None),
)

app.add_exception_handler(BookingFlowError, booking_error_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)

app.add_middleware(ErrorHandlingMiddleware)
app.add_middleware(LoggingMiddleware)
app.add_middleware(SecurityMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_error_responses = {status: {"model": ErrorResponse} for status in (400, 404, 409, 429, 500)}

app.include_router(otp_router.router, responses=_error_responses)
app.include_router(sms_router.router, responses=_error_responses)
app.include_router(booking_router.router, responses=_error_responses)


@app.get("/health")
def health_check(sms_gateway: SmsGateway = Depends(get_sms_gateway)):
    return {
        "status": "healthy" if getattr(app.state, "db_init_ok", True) else "degraded",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.ENV,
        "database": {
            "ok": getattr(app.state, "db_init_ok", True),
            "error": getattr(app.state, "db_init_error", None),
        },
        "sms": {
            "provider": settings.SMS_PROVIDER,
            "configured": sms_gateway.is_configured(),
        },
    }
