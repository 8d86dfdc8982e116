"""FastAPI application entry point."""
from fastapi import FastAPI

from insight_engine.logging_config import configure_logging
from insight_engine.routers import alerts, exercises, insights, recommendations


configure_logging()

app = FastAPI(title="Couple Insights API")


@app.get("/health", tags=["system"])
async def health_check() -> dict[str, str]:
    """Simple health probe for liveness checks."""
    return {"status": "ok"}


# Include routers
app.include_router(insights.router)
app.include_router(alerts.router)
app.include_router(recommendations.router)
app.include_router(exercises.router)
