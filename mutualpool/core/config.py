# mutualpool/core/config.py
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List, Optional


class Settings(BaseSettings):
    # ===================================
    # APPLICATION SETTINGS
    # ===================================
    APP_NAME: str = "MutualPool - Premium Pool Ledger"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # ===================================
    # API SETTINGS
    # ===================================
    API_PREFIX: str = "/api"
    ALLOWED_ORIGINS: List[str] = ["*"]

    # ===================================
    # ADMINISTRATION
    # ===================================
    OWNER_ID: str = "owner"  # Sole identity allowed to process claims and sweep the pool

    # ===================================
    # PREMIUM PRICING
    # ===================================
    PREMIUM_RATE_BPS: int = 100  # 1% of coverage
    BASIS_POINTS: int = 10000

    # ===================================
    # POLICY & CLAIM WINDOWS
    # ===================================
    MIN_POLICY_DURATION_DAYS: int = 30
    MAX_POLICY_DURATION_DAYS: Optional[int] = None  # None keeps the floor-only rule
    CLAIM_WAITING_PERIOD_DAYS: int = 30

    # ===================================
    # FILE STORAGE
    # ===================================
    PERSIST_LEDGER: bool = False
    DATA_DIR: str = "data"

    # ===================================
    # COMPUTED PROPERTIES
    # ===================================
    @property
    def ledger_dir(self) -> Optional[str]:
        """Directory for ledger snapshots, or None when running in memory."""
        return f"{self.DATA_DIR}/ledger" if self.PERSIST_LEDGER else None

    # ===================================
    # PYDANTIC CONFIG
    # ===================================
    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "allow"  # Allow extra fields from .env


# ===================================
# SINGLETON PATTERN
# ===================================
@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
