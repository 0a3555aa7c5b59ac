# Runtime configuration read from environment variables
import os
from functools import lru_cache
from typing import Optional
from pydantic import BaseModel, Field

VECTORIZER_SCHEMES = ("positional_bigram", "char_histogram")
STORAGE_BACKENDS = ("supabase", "memory")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_number(name: str, default: str, cast=int):
    value = os.getenv(name, default)
    try:
        return cast(value.strip())
    except ValueError as e:
        raise ValueError(f"{name} must be a {cast.__name__}, got {value!r}") from e


class Settings(BaseModel):
    """
    Settings for the catalog recommendation backend.
    Every field can be overridden through the environment (see from_env).
    """
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    storage_backend: str = "supabase"
    storage_timeout_seconds: float = Field(30.0, gt=0)

    titles_table: str = "netflix_titles"
    embeddings_table: str = "netflix_embeddings"
    key_column: str = "show_id"

    import_batch_size: int = Field(100, ge=1)
    embedding_batch_size: int = Field(50, ge=1)

    # The scheme is fixed per deployment: ingestion and query share it
    vectorizer_scheme: str = "positional_bigram"
    vector_width: int = Field(256, ge=1)
    embedding_transform_enabled: bool = True
    embedding_seed: int = 42

    default_recommendation_limit: int = Field(10, ge=1)
    max_recommendation_limit: int = Field(100, ge=1)
    max_training_steps: int = Field(10000, ge=10)

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        settings = cls(
            supabase_url=os.getenv("SUPABASE_URL"),
            supabase_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_ANON_KEY"),
            storage_backend=os.getenv("STORAGE_BACKEND", "supabase").lower(),
            storage_timeout_seconds=_env_number("STORAGE_TIMEOUT_SECONDS", "30", float),
            titles_table=os.getenv("TITLES_TABLE", "netflix_titles"),
            embeddings_table=os.getenv("EMBEDDINGS_TABLE", "netflix_embeddings"),
            import_batch_size=_env_number("IMPORT_BATCH_SIZE", "100"),
            embedding_batch_size=_env_number("EMBEDDING_BATCH_SIZE", "50"),
            vectorizer_scheme=os.getenv("VECTORIZER_SCHEME", "positional_bigram").lower(),
            vector_width=_env_number("VECTOR_WIDTH", "256"),
            embedding_transform_enabled=_env_bool("EMBEDDING_TRANSFORM_ENABLED", True),
            embedding_seed=_env_number("EMBEDDING_SEED", "42"),
            default_recommendation_limit=_env_number("DEFAULT_RECOMMENDATION_LIMIT", "10"),
            max_recommendation_limit=_env_number("MAX_RECOMMENDATION_LIMIT", "100"),
            max_training_steps=_env_number("MAX_TRAINING_STEPS", "10000"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

        if settings.vectorizer_scheme not in VECTORIZER_SCHEMES:
            raise ValueError(f"VECTORIZER_SCHEME must be one of {VECTORIZER_SCHEMES}, got {settings.vectorizer_scheme!r}")
        if settings.storage_backend not in STORAGE_BACKENDS:
            raise ValueError(f"STORAGE_BACKEND must be one of {STORAGE_BACKENDS}, got {settings.storage_backend!r}")

        return settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
