from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ladder import __version__
from ladder.config import cors_origins
from ladder.database import init_db
from ladder.routes import engine, leagues, rotations

app = FastAPI(title="Ladder League Scheduler API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(leagues.router, prefix="/api", tags=["leagues"])
app.include_router(rotations.router, prefix="/api", tags=["rotations"])

# Stateless engine previews (no persistence)
app.include_router(engine.router, prefix="/api", tags=["engine"])


@app.on_event("startup")
def on_startup():
    init_db()


@app.get("/api/health")
def health_check():
    """Diagnostic endpoint to verify which code is running"""
    return {"app_name": "Ladder League Scheduler API", "version": __version__, "status": "healthy"}
