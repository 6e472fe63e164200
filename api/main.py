"""
FastAPI application for the Timed Interview Engine.
Provides API endpoints for the candidate and interviewer web views.

Run with: uvicorn api.main:app --reload --port 8000
"""
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import config
from api.routes.candidates import router as candidates_router
from api.routes.interview import router as interview_router

config.configure_logging()

app = FastAPI(
    title="Timed Interview API",
    description="API for the timed, AI-scored screening interview",
    version="1.0.0"
)

# Configure CORS for the web frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(interview_router)
app.include_router(candidates_router)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "Timed Interview API"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
