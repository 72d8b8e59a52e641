import os
from dotenv import load_dotenv

# Load .env variables
load_dotenv()

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Operational Store (Station Readings) ---
MONGO_URI = os.getenv("MONGO_URI")
MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "groundwater_operations")
READINGS_COLLECTION = os.getenv("READINGS_COLLECTION", "readings")
STATIONS_COLLECTION = os.getenv("STATIONS_COLLECTION", "stations")

# Historical window fed to the trend test (one year of periodic readings)
READINGS_WINDOW_DAYS = int(os.getenv("READINGS_WINDOW_DAYS", "365"))

# --- Host-side Estimates ---
# Rough recharge proxy: litres/day per mm of annual rainfall.
# Used by the API layer only; the engine takes recharge as an opaque input.
RECHARGE_RAINFALL_FACTOR = float(os.getenv("RECHARGE_RAINFALL_FACTOR", "0.3"))

# --- Level Projection ---
PROJECTION_HORIZON_DAYS = int(os.getenv("PROJECTION_HORIZON_DAYS", "30"))

# --- API ---
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8300"))
