"""
FastAPI application exposing the slash command endpoint.

Internal tool: error responses carry diagnostic detail, so the service
should only be reachable from a trusted network.
"""

from typing import Optional

from fastapi import FastAPI, HTTPException, Request, Response

from src.smarta import __version__
from src.smarta.command import CommandError, CommandHandler
from src.smarta.formatter import to_payload
from src.smarta.providers.base import FetchError
from src.smarta.scheduler import PollScheduler
from src.smarta.verifier import AuthError
from src.utils.logger import get_logger

TIMESTAMP_HEADER = "X-Slack-Request-Timestamp"
SIGNATURE_HEADER = "X-Slack-Signature"


def create_app(
    handler: CommandHandler,
    scheduler: Optional[PollScheduler] = None,
    logger=None,
) -> FastAPI:
    """
    Build the ASGI app.

    Args:
        handler: Slash command handler
        scheduler: Poll scheduler, reported on /health when given
        logger: Logger to use (defaults to the application logger)
    """
    logger = logger or get_logger("server")
    app = FastAPI(title="smarta-slack", version=__version__)

    @app.get("/health")
    async def health():
        status = {"status": "ok"}
        if scheduler is not None:
            status["scheduler"] = scheduler.get_health_status()
        return status

    @app.post("/find-arrival")
    async def find_arrival(request: Request):
        body = await request.body()

        try:
            message = await handler.handle(
                body=body,
                content_type=request.headers.get("content-type"),
                timestamp=request.headers.get(TIMESTAMP_HEADER),
                signature=request.headers.get(SIGNATURE_HEADER),
            )
            payload = to_payload(message)
        except AuthError as e:
            logger.warning(f"Rejected unauthenticated request: {e}")
            raise HTTPException(status_code=401, detail=f"unauthorized: {e}")
        except CommandError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except FetchError as e:
            logger.error(f"Feed error while answering command: {e}")
            raise HTTPException(status_code=502, detail=f"feed error: {e}")
        except Exception as e:
            logger.exception(f"Unexpected error answering command: {e}")
            raise HTTPException(status_code=500, detail=f"Server error: {e}")

        return Response(content=payload, media_type="application/json")

    return app
