"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from couples_chat.core.config import settings
from couples_chat.core.errors import ChatbotError
from couples_chat.database import init_db
from couples_chat.api.chat import router as chat_router
from couples_chat.api.feedback import router as feedback_router

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.debug else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    debug=settings.debug
)

# The widget is embedded on arbitrary partner sites
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup."""
    logger.info(f"Starting up {settings.app_name}...")
    logger.info(f"APP_ENV={settings.app_env} (is_prod={settings.is_prod})")

    # Prod with a forced hosted model: require its key (fail fast)
    if settings.is_prod and settings.chat_responder == "llm" and not settings.provider_api_key:
        raise RuntimeError(
            f"{settings.ai_provider.upper()}_API_KEY is required when CHAT_RESPONDER=llm and APP_ENV=prod."
        )

    # Log responder configuration
    if settings.chat_responder == "template":
        logger.info("Responder: templates only")
    elif settings.provider_api_key:
        model = settings.openai_model if settings.ai_provider == "openai" else settings.llm_model
        logger.info(f"Responder: {settings.chat_responder} (provider: {settings.ai_provider}, model: {model})")
    else:
        logger.warning(
            f"{settings.ai_provider.upper()}_API_KEY not set. "
            f"Responder '{settings.chat_responder}' will {'fail' if settings.chat_responder == 'llm' else 'use templates'}."
        )

    # Initialize database
    try:
        init_db()
        logger.info("Database initialized")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")

    # Cache and Redis
    if settings.cache_enabled:
        from couples_chat.services.cache import redis_available
        if redis_available:
            logger.info("Cache enabled (Redis available)")
        else:
            logger.warning("Cache enabled but Redis not available, continuing without cache")
    else:
        logger.info("Cache disabled (CACHE_ENABLED=false)")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    logger.info("Shutting down...")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.app_version,
        "service": settings.app_name
    }


# Include API routers
app.include_router(chat_router, prefix="/api/v1/chatbot", tags=["Chatbot"])
app.include_router(feedback_router, prefix="/api/v1/chatbot", tags=["Feedback"])


@app.exception_handler(ChatbotError)
async def chatbot_error_handler(request: Request, exc: ChatbotError):
    """Known failures: validation messages are shown, everything else is generic."""
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.public_message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies are client errors (400) like missing fields."""
    errors = exc.errors()
    detail = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": detail})


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler - never expose stack traces."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "An error occurred processing your request."}
    )
