# Third-party imports
from fastapi import APIRouter

# Local imports
from .home_routes import router as home_router
from .upload_routes import router as upload_router

# Create parent router
router = APIRouter()

# Include sub-routers
router.include_router(home_router)
router.include_router(upload_router)
