"""
Centralized configuration management for Optionality OS.
All environment variables and settings are loaded and validated here.
"""
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field
from dotenv import load_dotenv

# Load .env file
load_dotenv()


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Secrets (e.g. SENTRY_DSN) belong in .env, never in git.
    """

    # ═══════════════════════════════════════════
    # SERVER CONFIGURATION
    # ═══════════════════════════════════════════
    PORT: int = Field(default=8000, description="Server port")
    LOG_LEVEL: str = Field(default="INFO", description="Root logging level")
    CORS_ORIGINS: str = Field(default="*", description="Comma-separated allowed origins")

    # ═══════════════════════════════════════════
    # MONITORING
    # ═══════════════════════════════════════════
    SENTRY_DSN: Optional[str] = Field(default=None, description="Sentry DSN (error tracking disabled if unset)")
    RATE_LIMIT: str = Field(default="120/minute", description="Default per-client rate limit")

    # ═══════════════════════════════════════════
    # DATABASE
    # ═══════════════════════════════════════════
    DATABASE_URL: str = Field(default="sqlite:///./optionality_os.db", description="Database connection URL")
    DB_LOCK_RETRIES: int = Field(default=3, description="Retries when SQLite reports 'database is locked'")
    DB_LOCK_RETRY_DELAY: float = Field(default=0.5, description="Seconds between lock retries")

    # ═══════════════════════════════════════════
    # SCORING
    # ═══════════════════════════════════════════
    DEFAULT_RULE_SET: str = Field(default="decision_os", description="Rule set used when none is given")
    PORTFOLIO_DECAY_DAYS: float = Field(default=90.0, description="Days until an unreviewed option hits the decay floor")
    PORTFOLIO_DECAY_FLOOR: float = Field(default=0.5, description="Minimum decay factor for stale options")

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env

    @property
    def cors_origins(self) -> list:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    def get_service_status(self) -> dict:
        """
        Return configuration status for all services.
        Masks secrets for security.
        """
        return {
            "server": {
                "port": self.PORT,
                "log_level": self.LOG_LEVEL,
            },
            "monitoring": {
                "sentry": "[OK] Configured" if self.SENTRY_DSN else "[X] Not configured",
                "rate_limit": self.RATE_LIMIT,
            },
            "scoring": {
                "default_rule_set": self.DEFAULT_RULE_SET,
                "portfolio_decay": f"{self.PORTFOLIO_DECAY_DAYS:g} days, floor {self.PORTFOLIO_DECAY_FLOOR:g}",
            },
            "database": {
                "type": "SQLite" if "sqlite" in self.DATABASE_URL.lower() else "Other",
                "url": self.DATABASE_URL.split("///")[-1] if "sqlite" in self.DATABASE_URL.lower() else "***"
            }
        }

    def print_startup_summary(self):
        """Print a formatted startup configuration summary."""
        status = self.get_service_status()

        print("\n" + "=" * 60)
        print("  OPTIONALITY OS - Configuration Summary")
        print("=" * 60)

        print(f"\nSERVER")
        print(f"   Port: {status['server']['port']}")
        print(f"   Log level: {status['server']['log_level']}")

        print(f"\nMONITORING")
        print(f"   Sentry: {status['monitoring']['sentry']}")
        print(f"   Rate limit: {status['monitoring']['rate_limit']}")

        print(f"\nSCORING")
        print(f"   Default rule set: {status['scoring']['default_rule_set']}")
        print(f"   Portfolio decay: {status['scoring']['portfolio_decay']}")

        print(f"\nDATABASE")
        print(f"   Type: {status['database']['type']}")
        print(f"   Location: {status['database']['url']}")

        print("\n" + "=" * 60 + "\n")


# Global settings instance
settings = Settings()
