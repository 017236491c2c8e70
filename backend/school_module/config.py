import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    database_url: str = os.getenv("SCHOOL_DATABASE_URL", "")
    jwt_secret: str = os.getenv("SCHOOL_JWT_SECRET", os.getenv("JWT_SECRET", "change-me-in-production-school-module"))
    jwt_algorithm: str = os.getenv("SCHOOL_JWT_ALGORITHM", "HS256")
    # "deny" or "allow" for a known resource type requested by a role with no ownership rule
    guard_unlisted_policy: str = os.getenv("SCHOOL_GUARD_UNLISTED_POLICY", "deny").lower()
    log_level: str = os.getenv("SCHOOL_LOG_LEVEL", "INFO").upper()


settings = Settings()
