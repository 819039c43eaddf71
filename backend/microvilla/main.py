from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from microvilla.config import settings
from microvilla.api.routes import router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Micro-Villa Subdivision Planner",
    description=(
        "Partition a rectangular parcel into a social club, shared facilities "
        "and micro-villa lots, then price the lots under several profit margins."
    ),
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.get("/")
async def root():
    return {
        "name": "Micro-Villa Subdivision Planner",
        "version": "1.0.0",
        "endpoints": {
            "api_docs": "/docs",
            "health": "/health",
            "scenarios": "POST /api/subdivision/scenarios",
            "scenario": "POST /api/subdivision/scenario",
            "financial_analysis": "POST /api/financial/analyze",
            "cost_allocation": "POST /api/financial/allocation",
        },
    }


@app.get("/health")
async def health():
    return {"status": "healthy", "version": "1.0.0"}
