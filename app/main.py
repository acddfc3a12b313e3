import asyncio
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from app.config import settings
from app.modules.auth import routes as auth_routes
from app.modules.profiles import routes as profiles_routes
from app.modules.contact import routes as contact_routes
from app.modules.generation import routes as generation_routes
from app.modules.tasks import routes as tasks_routes
from app.modules.task_comments import routes as task_comments_routes
from app.modules.task_labels import routes as task_labels_routes
from app.modules.task_sharing import routes as task_sharing_routes
from app.modules.task_time import routes as task_time_routes
from app.modules.task_templates import routes as task_templates_routes
from app.modules.notifications import routes as notifications_routes
from app.modules.payments import routes as payments_routes
from app.modules.admin import routes as admin_routes
from app.modules.tasks.events import task_events
from app.modules.notifications.reminder_scheduler import reminder_scheduler
from app.modules.notifications.realtime import task_notifier

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    if settings.is_production:
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
    return JSONResponse(status_code=500, content={"detail": str(exc)})


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                    (b"X-XSS-Protection", b"1; mode=block"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include module routes
app.include_router(auth_routes.router, prefix="/api/v1")
app.include_router(profiles_routes.router, prefix="/api/v1")
app.include_router(contact_routes.router, prefix="/api/v1")
app.include_router(generation_routes.router, prefix="/api/v1")
app.include_router(tasks_routes.router, prefix="/api/v1")
app.include_router(task_comments_routes.router, prefix="/api/v1")
app.include_router(task_labels_routes.router, prefix="/api/v1")
app.include_router(task_sharing_routes.router, prefix="/api/v1")
app.include_router(task_time_routes.router, prefix="/api/v1")
app.include_router(task_templates_routes.router, prefix="/api/v1")
app.include_router(notifications_routes.router, prefix="/api/v1")
app.include_router(payments_routes.router, prefix="/api/v1")
app.include_router(admin_routes.router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event():
    logger.info("Application startup")

    task_events.subscribe(reminder_scheduler.handle_event)
    task_events.subscribe(task_notifier.handle_event)

    if settings.enable_reminder_dispatch:
        try:
            reminder_scheduler.start()
        except Exception as e:
            logger.error(f"Failed to start reminder scheduler: {str(e)}")

    if settings.enable_subscription_expiry:
        from app.modules.payments.expiry_scheduler import subscription_expiry_loop
        app.state.expiry_task = asyncio.create_task(subscription_expiry_loop())
        logger.info(
            f"Subscription expiry loop started - checking every {settings.subscription_expiry_interval_sec}s"
        )


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutdown")
    reminder_scheduler.stop()

    expiry_task = getattr(app.state, "expiry_task", None)
    if expiry_task is not None:
        expiry_task.cancel()
        try:
            await expiry_task
        except asyncio.CancelledError:
            logger.info("Subscription expiry loop stopped")
        app.state.expiry_task = None

    task_events.unsubscribe(reminder_scheduler.handle_event)
    task_events.unsubscribe(task_notifier.handle_event)


@app.get("/")
async def root():
    return {"message": "Welcome to peakdraft-backend", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    """Readiness probe: extend here with Supabase checks if needed."""
    return {"status": "ready"}
