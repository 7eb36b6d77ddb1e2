"""FastAPI application: CORS and the two satellite routes.

Serve with ``uvicorn --factory api.server:create_app --port 4000``.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, Response

from core.errors import PersistenceError, StoreNotFoundError
from core.logging_config import get_logger
from store.satellite_sdk import TleSyncClient

_LOGGER = get_logger(__name__)


def create_app(client: TleSyncClient | None = None) -> FastAPI:
    """Build the HTTP application around an SDK client.

    Args:
        client: Optional SDK client, built from the environment when omitted.

    Returns:
        Configured FastAPI application.
    """
    sdk = client or TleSyncClient()
    app = FastAPI(
        title="tlesync",
        description="Resumable TLE catalog ingest with Cartesian positions",
        version="0.1.0",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.get("/api/update-sat")
    async def update_satellites() -> Response:
        summary = await sdk.ingest_async()
        if not summary.success:
            return PlainTextResponse("Failed to update satellite data.", status_code=500)
        return PlainTextResponse("Satellite data updated.")

    @app.get("/api/get-sat")
    def get_satellites() -> Response:
        try:
            store_text = sdk.read_store()
        except StoreNotFoundError:
            return PlainTextResponse("Satellite data not found.", status_code=404)
        except PersistenceError as error:
            _LOGGER.error("satellite_store_read_failed", error=str(error))
            return PlainTextResponse("Failed to read satellite data.", status_code=500)
        return Response(content=store_text, media_type="application/json")

    return app
