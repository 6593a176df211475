"""Configuration module for the study assistant pipeline."""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables from .env file
load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class StudyAssistantConfig(BaseModel):
    """Configuration for the transcript retrieval and answer pipeline.

    Covers transcript fetching and caching, chunking, embeddings, the Pinecone
    vector store, the Supabase notes store and the chat model used for each
    provider. All settings can be overridden via environment variables.
    """

    # Transcript source (Supadata)
    supadata_api_key: str = Field(
        default_factory=lambda: os.getenv("SUPADATA_API_KEY", "")
    )
    transcript_cache_ttl_seconds: int = Field(
        default_factory=lambda: int(os.getenv("TRANSCRIPT_CACHE_TTL_SECONDS", "600"))
    )
    # 0 means no size bound, matching the TTL-only behaviour
    transcript_cache_max_entries: int = Field(
        default_factory=lambda: int(os.getenv("TRANSCRIPT_CACHE_MAX_ENTRIES", "0"))
    )

    # Chunking settings (word windows)
    chunk_size: int = Field(
        default_factory=lambda: int(os.getenv("CHUNK_SIZE_WORDS", "50"))
    )
    chunk_overlap: int = Field(
        default_factory=lambda: int(os.getenv("CHUNK_OVERLAP_WORDS", "10"))
    )

    # Embedding settings
    embedding_provider: str = Field(
        default_factory=lambda: os.getenv("EMBEDDING_PROVIDER", "gemini")
    )
    embedding_model: str = Field(
        default_factory=lambda: os.getenv("EMBEDDING_MODEL_CHOICE", "text-embedding-004")
    )
    embedding_api_key: str = Field(
        default_factory=lambda: os.getenv("EMBEDDING_API_KEY")
        or os.getenv("GOOGLE_GEMINI_API", "")
    )
    embedding_base_url: str = Field(
        default_factory=lambda: os.getenv(
            "EMBEDDING_BASE_URL", "https://api.openai.com/v1"
        )
    )
    batch_size: int = Field(
        default_factory=lambda: int(os.getenv("EMBEDDING_BATCH_SIZE", "10"))
    )

    # Vector store settings (Pinecone)
    pinecone_api_key: str = Field(
        default_factory=lambda: os.getenv("PINECONE_API_KEY", "")
    )
    pinecone_index: str = Field(
        default_factory=lambda: os.getenv("PINECONE_INDEX", "studytube")
    )
    retrieval_top_k: int = Field(
        default_factory=lambda: int(os.getenv("RETRIEVAL_TOP_K", "5"))
    )
    index_segments: bool = Field(
        default_factory=lambda: _env_bool("INDEX_TRANSCRIPT_SEGMENTS")
    )

    # Notes store (Supabase)
    supabase_url: str = Field(default_factory=lambda: os.getenv("SUPABASE_URL", ""))
    supabase_key: str = Field(
        default_factory=lambda: os.getenv("SUPABASE_SERVICE_KEY", "")
    )

    # Chat models, one per provider
    gemini_model: str = Field(
        default_factory=lambda: os.getenv("GEMINI_MODEL", "gemini-2.0-flash-001")
    )
    openai_model: str = Field(
        default_factory=lambda: os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    )
    groq_model: str = Field(
        default_factory=lambda: os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile")
    )
    groq_base_url: str = Field(
        default_factory=lambda: os.getenv(
            "GROQ_BASE_URL", "https://api.groq.com/openai/v1"
        )
    )
    default_provider: str = Field(
        default_factory=lambda: os.getenv("DEFAULT_LLM_PROVIDER", "gemini")
    )

    @property
    def vector_store_enabled(self) -> bool:
        """Whether Pinecone credentials are present."""
        return bool(self.pinecone_api_key)

    @property
    def notes_store_enabled(self) -> bool:
        """Whether Supabase credentials are present."""
        return bool(self.supabase_url and self.supabase_key)


def get_config() -> StudyAssistantConfig:
    """Get validated configuration instance.

    Returns:
        StudyAssistantConfig: Validated configuration object with all settings.

    Raises:
        ValidationError: If environment variables hold invalid values.
    """
    return StudyAssistantConfig()
