from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Initial buffer size for new handles (BUFSIZ on most libc builds)
    default_buffer_size: int = Field(default=8192, ge=1)

    # Chunk size used when probing the uncompressed length of a gzip stream
    probe_chunk_size: int = Field(default=1 << 15, ge=1)

    # Used when a gzip mode string carries no level digit (zlib's default level)
    gzip_compresslevel: int = Field(default=6, ge=0, le=9)

    # Only consulted by the command-line scripts; the library never configures logging
    log_level: str = "WARNING"

    class Config:
        env_prefix = "FPWRAP_"
        env_file = ".env"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance.

    Call ``get_settings.cache_clear()`` to pick up changed environment variables.
    """
    return Settings()
