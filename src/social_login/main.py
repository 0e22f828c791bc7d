"""Social Login Service

Main FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from social_login.config.settings import get_settings
from social_login.api.routes import social_login
from social_login.infrastructure.redis.client import get_redis_client, close_redis_client

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    logger.info(f"Starting {settings.service_name} v{settings.service_version}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Social login providers: {', '.join(settings.social_login_providers)}")

    try:
        await get_redis_client()
        logger.info("Redis connection established")
    except Exception as e:
        logger.error(f"Failed to connect to Redis: {e}")
        raise

    yield

    # Shutdown
    logger.info("Shutting down Social Login Service")
    await close_redis_client()
    logger.info("Redis connection closed")


# Create FastAPI application
app = FastAPI(
    title="Social Login Service",
    version=settings.service_version,
    description="Social provider authentication and customer account reconciliation",
    lifespan=lifespan
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)


@app.get("/health")
async def root_health_check():
    """Health check endpoint"""
    redis_client = await get_redis_client()
    redis_ok = await redis_client.health_check()
    return {
        "status": "healthy" if redis_ok else "degraded",
        "service": settings.service_name,
        "version": settings.service_version,
        "environment": settings.environment,
        "redis": "ok" if redis_ok else "unavailable",
    }


app.include_router(social_login.router)


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler for unhandled errors"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred. Please try again later."
        }
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "social_login.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
