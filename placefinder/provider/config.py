from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class ProviderConfig:
    api_key: str = os.getenv("GOOGLE_MAPS_API_KEY", "")
    nearby_url: str = "https://maps.googleapis.com/maps/api/place/nearbysearch/json"
    details_url: str = "https://maps.googleapis.com/maps/api/place/details/json"
    timeout: float = float(os.getenv("PLACES_HTTP_TIMEOUT_SECONDS", "10"))


DEFAULT_PROVIDER_CONFIG = ProviderConfig()
