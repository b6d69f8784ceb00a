"""
LedgerPOS - Centralized Configuration
======================================
All environment variables and constants are loaded here.
No other module should call os.getenv() directly.
"""

import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


# ==========================================
# 🗄️ Database
# ==========================================
# Default is an in-memory SQLite database: nothing outlives the process.
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite://")


# ==========================================
# 📊 Ledger / Statistics
# ==========================================
# When true, daily cash_out sums same-day withdrawal transfers.
CASH_OUT_INCLUDES_WITHDRAWALS = _env_flag("CASH_OUT_INCLUDES_WITHDRAWALS", "false")

CURRENCY_LABEL = os.getenv("CURRENCY_LABEL", "IQD")

RECENT_TRANSACTIONS_LIMIT = 5


# ==========================================
# 🌐 Connectivity
# ==========================================
# Initial online state; stamped on new records as `synced`.
ASSUME_ONLINE = _env_flag("ASSUME_ONLINE", "true")


# ==========================================
# 🔧 App
# ==========================================
DEBUG = _env_flag("DEBUG", "false")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
SEED_DEMO_DATA = _env_flag("SEED_DEMO_DATA", "true")
