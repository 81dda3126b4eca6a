import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./locmark.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    APP_BASE_URL = data.get("APP_BASE_URL", "http://localhost:8000")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    AUTO_CREATE_TABLES = bool(data.get("AUTO_CREATE_TABLES", True))

    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    JWT_ALGORITHM = data.get("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_TTL_HOURS = data.get("ACCESS_TOKEN_TTL_HOURS", 24)

    SESSION_TTL_HOURS = data.get("SESSION_TTL_HOURS", 24)
    SESSION_EXTENDED_TTL_DAYS = data.get("SESSION_EXTENDED_TTL_DAYS", 30)
    SESSION_SWEEP_ENABLED = bool(data.get("SESSION_SWEEP_ENABLED", True))
    SESSION_SWEEP_INTERVAL_SECONDS = data.get("SESSION_SWEEP_INTERVAL_SECONDS", 3600)

    VERIFICATION_TOKEN_TTL_HOURS = data.get("VERIFICATION_TOKEN_TTL_HOURS", 24)
    RESET_TOKEN_TTL_MINUTES = data.get("RESET_TOKEN_TTL_MINUTES", 60)

    BCRYPT_ROUNDS = data.get("BCRYPT_ROUNDS", 12)
