"""
GHCN Trends: FastAPI application entry point.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ghcn_trends.api.router import router
from ghcn_trends.config import CORS_ORIGINS

app = FastAPI(
    title="GHCN Trends API",
    description="Station record completeness and annual temperature trends from GHCN daily data",
    version="0.1.0",
)

# CORS: origins from GHCN_TRENDS_CORS_ORIGINS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(router)


@app.get("/health")
async def health_check():
    return {"status": "ok", "service": "ghcn-trends"}
