"""Application configuration."""

import os

# Server settings
HOST = os.getenv("HOLDEM_HOST", "0.0.0.0")
PORT = int(os.getenv("HOLDEM_PORT", "8080"))

# CORS settings - comma-separated list of allowed origins
# Example: "https://poker.example.com,https://www.poker.example.com"
CORS_ORIGINS = os.getenv("HOLDEM_CORS_ORIGINS", "*").split(",")
CORS_ALLOW_ALL = os.getenv("HOLDEM_CORS_ORIGINS", "*") == "*"

# Default table settings, used when a table is created on first join
DEFAULT_SMALL_BLIND = int(os.getenv("HOLDEM_DEFAULT_SMALL_BLIND", "1"))
DEFAULT_BIG_BLIND = int(os.getenv("HOLDEM_DEFAULT_BIG_BLIND", "2"))
DEFAULT_MAX_SEATS = int(os.getenv("HOLDEM_DEFAULT_MAX_SEATS", "9"))
MIN_BUY_IN = int(os.getenv("HOLDEM_MIN_BUY_IN", "40"))
MAX_BUY_IN = int(os.getenv("HOLDEM_MAX_BUY_IN", "200"))

# Timers (seconds)
ACTION_TIMEOUT_SECONDS = float(os.getenv("HOLDEM_ACTION_TIMEOUT_SECONDS", "30"))
DISCONNECT_GRACE_SECONDS = float(os.getenv("HOLDEM_DISCONNECT_GRACE_SECONDS", "0"))
NEXT_HAND_DELAY_SECONDS = float(os.getenv("HOLDEM_NEXT_HAND_DELAY_SECONDS", "3"))

# Consecutive timeouts before a player is sat out
MAX_MISSED_TURNS = int(os.getenv("HOLDEM_MAX_MISSED_TURNS", "2"))

# House fee, percent of each pot that sees a flop; cap 0 means uncapped
RAKE_PERCENT = float(os.getenv("HOLDEM_RAKE_PERCENT", "0"))
RAKE_CAP = int(os.getenv("HOLDEM_RAKE_CAP", "0"))

# Production mode
PRODUCTION = os.getenv("HOLDEM_PRODUCTION", "false").lower() == "true"

# Debug mode
DEBUG = os.getenv("HOLDEM_DEBUG", "false").lower() == "true"

LOG_LEVEL = os.getenv("HOLDEM_LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()
