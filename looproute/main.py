import logging
from functools import lru_cache

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from looproute.config import settings
from looproute.errors import (
    APILimitExceededError,
    InvalidRouteRequestError,
    MapServiceError,
    RouteGenerationError,
)
from looproute.models.request import RouteRequest
from looproute.models.response import RouteResponse
from looproute.services.route_service import RouteService

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="LoopRoute API",
    description="Closed loop route generation for a target distance",
    version=settings.api_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify exact origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache
def get_route_service() -> RouteService:
    return RouteService()


# main api
@app.post("/api/v1/routes/generate", response_model=RouteResponse)
async def generate_routes(
    request: RouteRequest, route_service: RouteService = Depends(get_route_service)
):
    """Generate loop routes of the requested distance around the given center"""
    try:
        return await route_service.generate_response(request)
    except InvalidRouteRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except APILimitExceededError as e:
        raise HTTPException(status_code=429, detail=str(e))
    except MapServiceError as e:
        raise HTTPException(status_code=502, detail=f"Map service failed: {str(e)}")
    except RouteGenerationError as e:
        logger.warning("Route generation failed: %s", e)
        raise HTTPException(
            status_code=500, detail=f"Route generation failed: {str(e)}"
        )


@app.get("/health")
async def health_check():
    """Health check"""
    return {"status": "healthy", "version": settings.api_version}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
