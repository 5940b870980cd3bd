"""HTTP API for the shuttle and subway boards."""

import asyncio
import logging
import os
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from .board import ShuttleBoard
from .clock import TimeAuthority
from .config import AppConfig
from .exceptions import UpstreamError
from .subway import TransiterClient

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[AppConfig] = None,
    clock: Optional[TimeAuthority] = None,
    shuttle_board: Optional[ShuttleBoard] = None,
    subway_client: Optional[TransiterClient] = None,
) -> FastAPI:
    """
    Build the FastAPI app.

    Args:
        config: App configuration; defaults to AppConfig.from_env().
        clock: Shared time source.
        shuttle_board: Override for the shuttle orchestrator (tests).
        subway_client: Override for the Transiter client (tests).
    """
    config = config or AppConfig.from_env()
    clock = clock or TimeAuthority(config.timezone)
    shuttle_board = shuttle_board or ShuttleBoard(config, clock)
    subway_client = subway_client or TransiterClient(config, clock)

    app = FastAPI(title="Shuttle Track API")

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "service": "shuttletrack"}

    @app.get("/api/shuttle")
    async def shuttle():
        try:
            return await shuttle_board.to_dict()
        except UpstreamError as e:
            logger.error(f"Shuttle request failed: {e}")
            return JSONResponse(status_code=500, content={"error": "TripShot request failed"})
        except Exception:
            logger.exception("Shuttle API error")
            return JSONResponse(status_code=500, content={"error": "Shuttle API error"})

    @app.get("/api/subway")
    async def subway():
        try:
            board = await asyncio.to_thread(subway_client.get_board)
            return board.to_dict()
        except UpstreamError as e:
            logger.error(f"Subway request failed: {e}")
            return JSONResponse(status_code=500, content={"error": "Transiter request failed"})
        except Exception:
            logger.exception("Subway API error")
            return JSONResponse(status_code=500, content={"error": "Subway API error"})

    if os.path.isdir(config.public_dir):
        app.mount("/", StaticFiles(directory=config.public_dir, html=True), name="public")
    else:
        logger.warning(f"Static directory {config.public_dir} not found; serving API only")

    return app


def main() -> None:
    """Run the server with uvicorn."""
    import uvicorn

    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = AppConfig.from_env()
    app = create_app(config)
    logger.info(f"Server running at http://localhost:{config.port}")
    uvicorn.run(app, host=config.host, port=config.port)


if __name__ == "__main__":
    main()
