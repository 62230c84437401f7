import logging
import os

from dotenv import load_dotenv

load_dotenv()  # load .env from the working directory before settings are read

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from coastal_backend.config import get_app_settings
from coastal_backend.logger_config import setup_logger
from coastal_backend.routers import alerts, incidents, predictions, risk, sensors

settings = get_app_settings()
logger = setup_logger("coastal_backend", log_file=settings.log_file,
                      level=getattr(logging, settings.log_level, logging.INFO))

if settings.use_simulated_data:
    logger.info("[env] USE_SIMULATED_DATA set; marine feeds will not be contacted")
else:
    logger.info(
        f"[env] feeds: {len(settings.noaa_stations)} NOAA stations, "
        f"{len(settings.ndbc_buoys)} NDBC buoys, {len(settings.usgs_sites)} USGS sites"
    )

app = FastAPI(title="Coastal Threat Alert API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(sensors.router)
app.include_router(alerts.router)
app.include_router(predictions.router)
app.include_router(risk.router)
app.include_router(incidents.router)


@app.get("/health")
async def health_check() -> dict:
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))
