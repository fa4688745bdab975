import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv(override=True)


def _env_bool(name: str, default: bool = False) -> bool:
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "y", "on"}


@dataclass(frozen=True)
class Settings:
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./otp.db")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    otp_length: int = int(os.getenv("OTP_LENGTH", "6"))
    otp_default_ttl_seconds: int = int(os.getenv("OTP_DEFAULT_TTL_SECONDS", "300"))
    otp_min_numeric: int = int(os.getenv("OTP_MIN_NUMERIC", "4"))
    otp_max_numeric: int = int(os.getenv("OTP_MAX_NUMERIC", "6"))
    otp_min_alphabetic: int = int(os.getenv("OTP_MIN_ALPHABETIC", "4"))
    otp_max_alphabetic: int = int(os.getenv("OTP_MAX_ALPHABETIC", "6"))
    otp_store_timeout_seconds: float = float(
        os.getenv("OTP_STORE_TIMEOUT_SECONDS", "5.0")
    )
    otp_sweep_interval_seconds: int = int(
        os.getenv("OTP_SWEEP_INTERVAL_SECONDS", "60")
    )
    otp_debug: bool = _env_bool("OTP_DEBUG", False)


settings = Settings()
