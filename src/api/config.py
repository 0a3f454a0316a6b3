"""Service settings.

Values are read from the environment (and a local .env file, if present)
once at import time. Only the API layer reads settings; the engine receives
plain values built from them.
"""

import json
import os
from datetime import timedelta

from dotenv import load_dotenv
from pydantic import BaseModel

from src.recommender.weights import DEFAULT_EVENT_WEIGHTS, WeightTable

load_dotenv()

DEFAULT_EVENT_WEIGHTS_JSON = json.dumps(DEFAULT_EVENT_WEIGHTS)


class Settings(BaseModel):
    lookback_days: float = float(os.getenv("RECO_LOOKBACK_DAYS", "30"))
    default_limit: int = int(os.getenv("RECO_DEFAULT_LIMIT", "5"))
    max_limit: int = int(os.getenv("RECO_MAX_LIMIT", "100"))
    event_weights: str = os.getenv("RECO_EVENT_WEIGHTS", DEFAULT_EVENT_WEIGHTS_JSON)
    events_csv: str = os.getenv("RECO_EVENTS_CSV", "")

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def lookback(self) -> timedelta:
        return timedelta(days=self.lookback_days)

    def weight_table(self) -> WeightTable:
        return WeightTable.from_json(self.event_weights)


settings = Settings()
