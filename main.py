# Standard library imports
import logging
from pathlib import Path

# Third-party imports
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

# Local imports
from config import get_settings
from middleware import RequestLoggingMiddleware, register_error_handlers

# Plugin system
from plugin_manager import plugin_manager

# Get settings
settings = get_settings()

# Set up logging
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME)

# Signed session cookie; only holds pending OAuth state and PKCE verifiers
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SECRET_KEY,
    session_cookie=settings.SESSION_COOKIE_NAME,
    max_age=settings.SESSION_MAX_AGE_SECONDS,
    same_site="lax",
    https_only=settings.SESSION_HTTPS_ONLY
)
app.add_middleware(RequestLoggingMiddleware)

register_error_handlers(app)

# Import and include routers
from ui_routes import router as ui_router

app.include_router(ui_router)

# Initialize plugins and mount their routes
plugin_manager.discover_plugins()

service_routers = plugin_manager.get_service_routers()
for service_name, router in service_routers.items():
    app.include_router(router)
    logger.info(f"Mounted routes for platform: {service_name}")

# Serve composer uploads
Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
app.mount(settings.UPLOAD_URL_PREFIX, StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_level=settings.LOG_LEVEL.lower()
    )
