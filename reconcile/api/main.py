"""FastAPI application setup."""

from fastapi import FastAPI

from reconcile import __version__
from .routes import router

# Create FastAPI app
app = FastAPI(
    title="Row Reconciler",
    description="Enrich tabular records by reconciling them against external lookup APIs",
    version=__version__,
)


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


# Include API routes
app.include_router(router, prefix="/api")
