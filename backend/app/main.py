import logging
import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp, Receive, Scope, Send

from app.api.cart import router as cart_router
from app.api.promotions import router as promotions_router
from app.core.config import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("app")


app = FastAPI(title="Mavryk Premium Store API", version="0.1.0")

cors_origins = settings.cors_origins.split(",")


class TimingMiddleware:
    """Plain ASGI middleware logging method, path, status and duration."""
    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        t0 = time.perf_counter()
        status_code = 0

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        await self.app(scope, receive, send_wrapper)
        ms = int((time.perf_counter() - t0) * 1000)
        logger.info(f"{scope.get('method', '?')} {scope.get('path', '?')} -> {status_code} in {ms}ms")


app.add_middleware(TimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(promotions_router)
app.include_router(cart_router)


@app.get("/api/health")
async def health():
    return {"status": "ok"}
