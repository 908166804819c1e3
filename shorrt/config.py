import os
from pathlib import Path
from urllib.parse import quote

from dotenv import load_dotenv
from pydantic import BaseModel

# Resolved against the working directory so an installed package still finds them
ENV_FILE = ".env"
SQLITE_FILE = "urlshortener.db"


class Settings(BaseModel):
    environment: str = "dev"
    database_url: str | None = None
    redis_url: str | None = None
    qr_dir: str = "qrcodes"
    qr_box_size: int = 8
    public_base_url: str | None = None
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8080

    @property
    def is_prod(self) -> bool:
        return self.environment == "prod"


def _redis_url_from_env() -> str | None:
    # REDIS_URL wins; REDIS_ADDR (host:port) + REDIS_PASSWORD is also accepted
    url = os.getenv("REDIS_URL")
    if url:
        return url
    addr = (os.getenv("REDIS_ADDR") or "").strip()
    if not addr:
        return None
    password = os.getenv("REDIS_PASSWORD") or ""
    db = os.getenv("REDIS_DB", "0")
    auth = f":{quote(password, safe='')}@" if password else ""
    return f"redis://{auth}{addr}/{db}"


def load_settings() -> Settings:
    load_dotenv(Path.cwd() / ENV_FILE)
    return Settings(
        environment=os.getenv("ENVIRONMENT", "dev"),
        database_url=os.getenv("DATABASE_URL") or None,
        redis_url=_redis_url_from_env(),
        qr_dir=os.getenv("QR_DIR", "qrcodes"),
        qr_box_size=int(os.getenv("QR_BOX_SIZE", 8)),
        public_base_url=(os.getenv("PUBLIC_BASE_URL") or "").rstrip("/") or None,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", 8080)),
    )
