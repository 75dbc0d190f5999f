import os
import ssl
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel
from sqlalchemy.engine import URL, make_url
from sqlalchemy.pool import StaticPool

TRUTHY = {"1", "true", "yes", "on", "require"}


def _first(environ: Mapping[str, str], *names: str) -> Optional[str]:
    for name in names:
        value = environ.get(name)
        if value:
            return value
    return None


class Settings(BaseModel):
    """Runtime configuration read from the environment."""

    database_url_raw: Optional[str] = None
    db_user: Optional[str] = None
    db_password: Optional[str] = None
    db_host: Optional[str] = None
    db_port: Optional[int] = None
    db_name: Optional[str] = None
    db_ssl: bool = True

    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        db_port = _first(env, "DB_PORT")
        return cls(
            database_url_raw=_first(env, "DATABASE_URL"),
            db_user=_first(env, "DB_USER"),
            db_password=_first(env, "DB_PASSWORD"),
            db_host=_first(env, "DB_SERVER", "DB_HOST"),
            db_port=int(db_port) if db_port else None,
            db_name=_first(env, "DB_DATABASE", "DB_NAME"),
            db_ssl=env.get("DB_SSL", "true").strip().lower() in TRUTHY,
            host=env.get("HOST", "0.0.0.0"),
            port=int(env.get("PORT", "3000")),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )

    @property
    def database_url(self) -> URL:
        # A full connection string wins over the separate DB_* values
        if self.database_url_raw:
            url = make_url(self.database_url_raw)
        else:
            url = URL.create(
                "postgresql",
                username=self.db_user,
                password=self.db_password,
                host=self.db_host,
                port=self.db_port,
                database=self.db_name,
            )
        return normalize_driver(url)

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.get_backend_name() == "sqlite"


def normalize_driver(url: URL) -> URL:
    """Point plain postgres/sqlite URLs at their async drivers."""
    if url.drivername in ("postgres", "postgresql", "postgresql+psycopg2"):
        return url.set(drivername="postgresql+asyncpg")
    if url.drivername == "sqlite":
        return url.set(drivername="sqlite+aiosqlite")
    return url


def insecure_ssl_context() -> ssl.SSLContext:
    """Encrypted transport without certificate validation."""
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


def engine_options(settings: Settings) -> Dict[str, Any]:
    """Build the URL and keyword arguments for ``create_async_engine``."""
    url = settings.database_url

    if url.get_backend_name() == "sqlite":
        return {
            "url": url,
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
        }

    # asyncpg rejects libpq's sslmode keyword
    sslmode = url.query.get("sslmode")
    if sslmode is not None:
        url = url.difference_update_query(["sslmode"])

    use_ssl = settings.db_ssl if sslmode is None else sslmode != "disable"
    connect_args = {"ssl": insecure_ssl_context()} if use_ssl else {}
    return {"url": url, "connect_args": connect_args}
