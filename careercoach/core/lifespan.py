from contextlib import asynccontextmanager
import asyncio
import logging

from careercoach.ai.factory import get_ai_client
from careercoach.core.config import settings
from careercoach.store.db import Store
from careercoach.store.seed import seed_quiz_data

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    store = Store(settings.store_path)
    await asyncio.to_thread(store.open)

    if settings.seed_on_startup:
        try:
            await asyncio.to_thread(seed_quiz_data, store)
        except Exception as exc:  # pragma: no cover - seeding is best effort
            logger.warning("quiz_seed_failed: %s", exc)

    # One AI client per process; it owns an HTTP connection pool.
    ai_client = get_ai_client()

    app.state.store = store
    app.state.ai_client = ai_client
    try:
        yield
    finally:
        app.state.store = None
        app.state.ai_client = None
        if ai_client is not None:
            try:
                await ai_client.close()
            except Exception as exc:  # pragma: no cover - shutdown continues
                logger.warning("ai_client_close_failed: %s", exc)
        await asyncio.to_thread(store.close)
