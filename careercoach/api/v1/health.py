import asyncio

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health", summary="Health Check", description="Check the health status of the application and its store.")
async def health_check(request: Request):
    store = getattr(request.app.state, "store", None)
    database = "disconnected"
    if store is not None and store.is_open:
        try:
            await asyncio.to_thread(store.ping)
            database = "connected"
        except Exception:  # noqa: BLE001 - health reports, it does not fail
            database = "error"
    return {"status": "healthy", "message": "Career Coach API is running", "database": database}
