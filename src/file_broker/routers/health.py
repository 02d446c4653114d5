from fastapi import APIRouter, Request
from file_broker.adapters.file_store import FileStoreFactory
from file_broker.settings import Settings

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """
    Health check endpoint for monitoring API status and component readiness.

    Returns status of the API and file store along with deployment mode.
    """
    settings: Settings = request.app.state.settings

    health_status = {
        "status": "ok",
        "deployment_mode": settings.deployment_mode,
        "components": {
            "api": "ready",
            "file_store": "initializing",
        },
        "ready": False
    }

    try:
        FileStoreFactory.get_file_store(settings.notebook_id, settings)
        health_status["components"]["file_store"] = "ready"
    except Exception as e:
        health_status["components"]["file_store"] = f"error: {str(e)}"
        health_status["status"] = "degraded"

    health_status["ready"] = all(
        state == "ready" for state in health_status["components"].values()
    )

    return health_status
