from fastapi import APIRouter

from coastal_backend.feeds.predictions import mock_predictions
from coastal_backend.schemas.coastal import Prediction

router = APIRouter(prefix="/predictions", tags=["predictions"])


@router.get("", response_model=list[Prediction])
async def get_predictions() -> list[Prediction]:
    # TODO: replace the fixed curves once the forecasting model is served
    return mock_predictions()
