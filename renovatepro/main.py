from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
import sys

from renovatepro.config import get_settings
from renovatepro.routers import admin, marketing, materials, projects, wizard
from renovatepro.middleware.rate_limiter import RateLimitMiddleware
from renovatepro.store import get_context

settings = get_settings()

# Configure loguru
logger.remove()
logger.add(
    sys.stderr,
    format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
    level=settings.log_level,
)

app = FastAPI(
    title="RenovatePro API",
    description="AI renovation visualizations, project tracking and client exports for contractors",
    version="1.0.0",
)

# Middleware
app.add_middleware(RateLimitMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.app_base_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(marketing.router)
app.include_router(materials.router)
app.include_router(projects.router)
app.include_router(projects.profile_router)
app.include_router(wizard.router)
app.include_router(admin.router)


@app.get("/health")
async def health_check():
    return {"status": "ok", "version": "1.0.0"}


@app.get("/health/detailed")
async def detailed_health_check():
    """Detailed health check with dependency status."""
    health = {
        "status": "ok",
        "version": "1.0.0",
        "dependencies": {},
    }

    # Generation runs only with a Gemini key
    if settings.gemini_api_key:
        health["dependencies"]["gemini"] = "ok"
    else:
        health["dependencies"]["gemini"] = "not configured"
        health["status"] = "degraded"

    try:
        import redis
        r = redis.from_url(settings.redis_url)
        r.ping()
        health["dependencies"]["redis"] = "ok"
    except Exception as e:
        health["dependencies"]["redis"] = f"error: {str(e)[:100]}"

    ctx = get_context()
    health["store"] = {
        "projects": len(ctx.projects),
        "materials": len(ctx.materials),
        "active_wizards": len(ctx.sessions),
    }
    return health
