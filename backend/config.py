"""Application configuration via environment variables."""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent

# Database (project snapshots)
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite+aiosqlite:///{BASE_DIR / 'vastu_planner.db'}")

# Grok (xAI) API: AI-assisted layout generator
GROK_API_KEY = os.getenv("GROK_API_KEY", "")
GROK_MODEL = os.getenv("GROK_MODEL", "grok-3-mini")
GROK_BASE_URL = os.getenv("GROK_BASE_URL", "https://api.x.ai/v1")

# Server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# CORS
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000").split(",")

# Layout engine
DEFAULT_VASTU_MODE = os.getenv("DEFAULT_VASTU_MODE", "soft")
OPTIMIZER_ITERATIONS = int(os.getenv("OPTIMIZER_ITERATIONS", "120"))
OPTIMIZER_SEED = int(os.getenv("OPTIMIZER_SEED", "1234"))
VASTU_RULES_PATH = os.getenv("VASTU_RULES_PATH") or None
