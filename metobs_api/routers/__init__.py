# API routers package

from metobs_api.routers.observations import router as observations_router
from metobs_api.routers.status import router as status_router

# Re-export for easy importing
observations = observations_router
status = status_router
