# tripilot/api/config.py
"""Configuration management for the trip planner service."""
import os
import logging

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

TAX_RATE = 0.12


def _env_flag(name, default):
    return os.getenv(name, "true" if default else "false").strip().lower() in ("1", "true", "yes", "on")


def get_port():
    """Get port configuration."""
    return int(os.getenv("PORT", 5000))


def get_secret_key():
    """Get the Flask secret key, generating a throwaway one when unset."""
    secret = os.getenv("FLASK_SECRET_KEY")
    if not secret:
        logger.warning("No FLASK_SECRET_KEY found. Generated a temporary key.")
        secret = os.urandom(32).hex()
    return secret


def get_store_config():
    """Get state store configuration."""
    return {
        # Start every new session with the Kyoto sample trip and bucket list
        "seed_sample_data": _env_flag("TRIPILOT_SEED_SAMPLE_DATA", True),
        # Fall back to the mock generators when the assistant sends no results
        "offline_search": _env_flag("TRIPILOT_OFFLINE_SEARCH", False),
    }


def get_checkout_config():
    """Get checkout simulation configuration."""
    return {
        "delay_seconds": float(os.getenv("TRIPILOT_CHECKOUT_DELAY", "2.0")),
        "tax_rate": TAX_RATE,
    }


def get_session_config():
    """Get per-browser session configuration."""
    return {
        "session_timeout_seconds": int(os.getenv("TRIPILOT_SESSION_TIMEOUT_SECONDS", "3600")),
        "max_sessions": int(os.getenv("TRIPILOT_MAX_SESSIONS", "500")),
        "cleanup_interval_seconds": int(os.getenv("TRIPILOT_CLEANUP_INTERVAL_SECONDS", "60")),
    }


def get_map_config():
    """Get map renderer configuration."""
    return {
        "tile_url": os.getenv(
            "MAP_TILE_URL",
            "https://{s}.basemaps.cartocdn.com/rastertiles/voyager/{z}/{x}/{y}{r}.png",
        ),
        "attribution": os.getenv("MAP_ATTRIBUTION", '&copy; <a href="https://carto.com/">CARTO</a>'),
        "default_center": {"lat": 25.0, "lng": 10.0},
        "default_zoom": 2.5,
        "min_zoom": 2,
        "max_zoom": 18,
        "fly_to_zoom": int(os.getenv("MAP_FLY_TO_ZOOM", "12")),
        "fly_to_duration": float(os.getenv("MAP_FLY_TO_DURATION", "1.5")),
    }


def get_websocket_config():
    """Get WebSocket configuration."""
    return {
        "ping_interval": int(os.getenv("WEBSOCKET_PING_INTERVAL", "25")),
        "ping_timeout": int(os.getenv("WEBSOCKET_PING_TIMEOUT", "60")),
        "cors_allowed_origins": os.getenv("WEBSOCKET_CORS_ORIGINS", "*").split(","),
    }


def get_assistant_config():
    """Get the prompt context handed to the external assistant."""
    return {
        "title": os.getenv("ASSISTANT_TITLE", "Tripilot AI"),
        "greeting": (
            "Hey! I'm your AI travel planner. Tell me where you want to go and I'll plan "
            "your dream trip: flights, hotels, day-by-day itinerary, all on the map. "
            "Try: \"Plan a 5-day trip to Tokyo\""
        ),
        "instructions": """You are Tripilot, an expert AI travel planner. You have access to the user's bucket list, current trips, and a world map.

    When providing flight, hotel, or restaurant data, use REAL places from your knowledge: real airline, hotel and restaurant names, approximate prices and real ratings.

    - To PLAN a trip use planTrip with a day-by-day itinerary and accurate GPS coordinates.
    - For FLIGHTS use searchFlights, for HOTELS use searchHotels, for FOOD use searchRestaurants.
    - To save a place use addToBucketList.
    - To BOOK something use bookTrip, once per item. The user confirms and pays in the app; never ask for card details in chat.
    - To COMPARE or VISUALIZE data use createTripCard.

    Always quote prices in USD and reference the user's existing trips and bucket list naturally.""",
    }
