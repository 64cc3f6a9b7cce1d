"""Конфигурация приложения."""
import os
from functools import lru_cache


@lru_cache
def get_config():
    return type("Config", (), {
        "allowed_origins": os.environ.get("ALLOWED_ORIGINS", "*").split(","),
        "log_level": os.environ.get("LOG_LEVEL", "INFO").upper(),
        "store_mode": os.environ.get("STORE_MODE", "memory").strip().lower() or "memory",
        "store_dir": os.environ.get("STORE_DIR", "").strip(),
    })()
