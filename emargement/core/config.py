import os

from dotenv import load_dotenv


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


APP_ENV = os.getenv("APP_ENV", "development")
DEBUG = _get_bool(os.getenv("DEBUG"), default=False)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./emargement.db")
DB_TIMEOUT_SECONDS = int(os.getenv("DB_TIMEOUT_SECONDS", "10"))

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10"))

# "reject" answers a repeated emargement with 409, "overwrite" re-marks the existing row.
ATTENDANCE_DUPLICATE_POLICY = os.getenv("ATTENDANCE_DUPLICATE_POLICY", "reject").strip().lower()
ATTENDANCE_DUPLICATE_POLICIES = {"reject", "overwrite"}

CORS_ALLOW_ORIGINS = _get_list(os.getenv("CORS_ALLOW_ORIGINS", "http://localhost:4200"))


def validate_runtime_config() -> None:
    if APP_ENV.lower() == "production" and JWT_SECRET_KEY == "change-me":
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")
    if ATTENDANCE_DUPLICATE_POLICY not in ATTENDANCE_DUPLICATE_POLICIES:
        raise RuntimeError(
            f"ATTENDANCE_DUPLICATE_POLICY must be one of {sorted(ATTENDANCE_DUPLICATE_POLICIES)}."
        )
