"""
Environment-aware configuration.
Secrets fall back to fixed development defaults; deployment_warnings()
lists everything that must be changed before a production deploy.
"""
import os
from dotenv import load_dotenv
from datetime import timedelta

load_dotenv()  # Read .env if present

DEFAULT_JWT_SECRET = "dev-access-secret-change-me-before-deploying"
DEFAULT_REFRESH_SECRET = "dev-refresh-secret-change-me-before-deploying"
PRODUCTION_ENVS = ("prod", "production")


class BaseConfig:
    DEBUG = False
    TESTING = False
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    APP_ENV = os.getenv("APP_ENV", "dev")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///session-core.db")
    # memory | database
    REFRESH_REGISTRY_BACKEND = os.getenv("REFRESH_REGISTRY_BACKEND", "memory")

    JWT_SECRET = os.getenv("JWT_SECRET", DEFAULT_JWT_SECRET)
    REFRESH_SECRET = os.getenv("REFRESH_SECRET", DEFAULT_REFRESH_SECRET)
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "session-core")
    ACCESS_TOKEN_EXPIRES = timedelta(hours=24)
    REFRESH_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("REFRESH_TOKEN_EXPIRES_SECONDS", "604800")))

    # ids with this prefix are synthetic users served without the store
    TEST_IDENTITY_PREFIX = os.getenv("TEST_IDENTITY_PREFIX", "test-user-")
    TEST_IDENTITIES_ENABLED = os.getenv("APP_ENV", "dev").lower() not in PRODUCTION_ENVS


class DevelopmentConfig(BaseConfig):
    DEBUG = True


class TestingConfig(BaseConfig):
    TESTING = True
    APP_ENV = "test"
    DATABASE_URL = "sqlite://"
    REFRESH_REGISTRY_BACKEND = "memory"
    JWT_SECRET = "test-access-secret-0123456789abcdef0123456789"
    REFRESH_SECRET = "test-refresh-secret-0123456789abcdef0123456789"
    TEST_IDENTITIES_ENABLED = True


class ProductionConfig(BaseConfig):
    DEBUG = False
    APP_ENV = "production"
    TEST_IDENTITIES_ENABLED = False


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/test/prod).
    """
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in PRODUCTION_ENVS:
        return ProductionConfig
    if env in ("test", "testing"):
        return TestingConfig
    return DevelopmentConfig


def is_production(config) -> bool:
    return str(config.get("APP_ENV", "")).lower() in PRODUCTION_ENVS


def deployment_warnings(config) -> list[str]:
    """Insecure settings that must not survive into a production deployment."""
    warnings = []
    if config.get("JWT_SECRET") == DEFAULT_JWT_SECRET:
        warnings.append("JWT_SECRET is the insecure development default")
    if config.get("REFRESH_SECRET") == DEFAULT_REFRESH_SECRET:
        warnings.append("REFRESH_SECRET is the insecure development default")
    if config.get("JWT_SECRET") == config.get("REFRESH_SECRET"):
        warnings.append("JWT_SECRET and REFRESH_SECRET must differ")
    if config.get("TEST_IDENTITIES_ENABLED"):
        warnings.append("synthetic test identities are enabled")
    if config.get("CORS_ORIGINS") == "*":
        warnings.append("CORS_ORIGINS allows any origin")
    return warnings
