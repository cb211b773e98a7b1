import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.config import settings
from backend.models.response import HealthResponse
from backend.routers.search import router as search_router
from backend.routers.terminal import router as terminal_router
from backend.services.graph_store import get_store

logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

app = FastAPI(title="Terminal Flow API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_origin_regex=settings.CORS_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(terminal_router)
app.include_router(search_router)


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    store = get_store()
    return HealthResponse(status="ok", nodes=len(store.nodes), edges=len(store.edges))
