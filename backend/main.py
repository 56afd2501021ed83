"""
Vastu Floor Plan Planner – FastAPI Backend

Main entry point. Sets up logging, CORS, includes all routes, initializes DB.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import CORS_ORIGINS, LOG_LEVEL
from database import init_db

# Import route modules
from routes.layout import router as layout_router
from routes.templates import router as templates_router
from routes.projects import router as projects_router
from routes.ai_design import router as ai_design_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

APP_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database on startup."""
    await init_db()
    yield


app = FastAPI(
    title="Vastu Floor Plan Planner",
    description="Generate, score and adapt Vastu-compliant floor plan layouts",
    version=APP_VERSION,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(layout_router)
app.include_router(templates_router)
app.include_router(projects_router)
app.include_router(ai_design_router)


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "version": APP_VERSION}


if __name__ == "__main__":
    import uvicorn
    from config import HOST, PORT
    uvicorn.run("main:app", host=HOST, port=PORT, reload=True)
