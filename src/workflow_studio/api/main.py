"""FastAPI application."""
from fastapi import FastAPI

from workflow_studio import __version__
from workflow_studio.api.routes import canvas, health, templates, workflow
from workflow_studio.observability import setup_logging

# Setup logging
setup_logging()

# Create FastAPI app
app = FastAPI(
    title="Workflow Studio",
    description="Build workflow graphs and run them through a simulated executor",
    version=__version__,
)

# Include routers
app.include_router(health.router, tags=["health"])
app.include_router(workflow.router, tags=["workflow"])
app.include_router(templates.router, tags=["templates"])
app.include_router(canvas.router, tags=["canvas"])


@app.get("/")
def root() -> dict:
    """Root endpoint."""
    return {
        "service": "workflow-studio",
        "version": __version__,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
