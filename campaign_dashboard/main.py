from datetime import datetime, timezone

from fastapi import FastAPI

from campaign_dashboard.api import router
from campaign_dashboard.logging_config import configure_logging
from campaign_dashboard.schemas import HealthOut
from campaign_dashboard.settings import settings

configure_logging()

app = FastAPI(title=settings.APP_TITLE, version="0.1.0")
app.include_router(router)


@app.get("/health", response_model=HealthOut, tags=["health"])
def healthcheck():
    return HealthOut(status="ok", timestamp=datetime.now(timezone.utc))
