"""Configuration loader for the Travix travel orchestrator."""

import os
from dotenv import load_dotenv

load_dotenv()

# Amadeus Self-Service
AMADEUS_CLIENT_ID = os.getenv("AMADEUS_CLIENT_ID", "")
AMADEUS_CLIENT_SECRET = os.getenv("AMADEUS_CLIENT_SECRET", "")
AMADEUS_BASE_URL = os.getenv("AMADEUS_BASE_URL", "https://test.api.amadeus.com")
AMADEUS_TIMEOUT = float(os.getenv("AMADEUS_TIMEOUT", "30"))
AMADEUS_RETRIES = int(os.getenv("AMADEUS_RETRIES", "0"))

# Caching (seconds, 0 disables)
LOOKUP_CACHE_TTL = float(os.getenv("LOOKUP_CACHE_TTL", "3600"))
OFFER_CACHE_TTL = float(os.getenv("OFFER_CACHE_TTL", "900"))

# Enrichment
ENRICHMENT_WORKERS = int(os.getenv("ENRICHMENT_WORKERS", "8"))

# Booking
PHONE_COUNTRY_CODE = os.getenv("PHONE_COUNTRY_CODE", "91")

# Mock API
USE_MOCK_API = os.getenv("USE_MOCK_API", "false").lower() in ("true", "1", "yes")
MOCK_DELAYS = os.getenv("MOCK_DELAYS", "false").lower() in ("true", "1", "yes")

# Server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))


def validate():
    """Validate required configuration is present."""
    missing = []
    if not USE_MOCK_API:
        if not AMADEUS_CLIENT_ID:
            missing.append("AMADEUS_CLIENT_ID")
        if not AMADEUS_CLIENT_SECRET:
            missing.append("AMADEUS_CLIENT_SECRET")
    if missing:
        print(f"WARNING: Missing config: {', '.join(missing)}")
        print("Upstream calls will fail. Copy .env.example to .env and fill in values, "
              "or set USE_MOCK_API=true.")
