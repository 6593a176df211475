"""Unit tests for study pipeline configuration."""

import pytest

from src.study_pipeline.config import StudyAssistantConfig, get_config


@pytest.mark.unit
class TestStudyAssistantConfig:
    """Test suite for StudyAssistantConfig class."""

    def test_config_with_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test config creation with default values."""
        for name in (
            "TRANSCRIPT_CACHE_TTL_SECONDS",
            "CHUNK_SIZE_WORDS",
            "CHUNK_OVERLAP_WORDS",
            "EMBEDDING_PROVIDER",
            "EMBEDDING_MODEL_CHOICE",
            "RETRIEVAL_TOP_K",
            "INDEX_TRANSCRIPT_SEGMENTS",
            "DEFAULT_LLM_PROVIDER",
            "GROQ_BASE_URL",
        ):
            monkeypatch.delenv(name, raising=False)

        config = StudyAssistantConfig()

        assert config.transcript_cache_ttl_seconds == 600
        assert config.chunk_size == 50
        assert config.chunk_overlap == 10
        assert config.embedding_provider == "gemini"
        assert config.embedding_model == "text-embedding-004"
        assert config.retrieval_top_k == 5
        assert config.index_segments is False
        assert config.default_provider == "gemini"
        assert config.groq_base_url == "https://api.groq.com/openai/v1"

    def test_config_with_explicit_values(self) -> None:
        """Test config creation with explicit parameter values."""
        config = StudyAssistantConfig(
            supadata_api_key="sd_key",
            chunk_size=80,
            chunk_overlap=20,
            pinecone_api_key="pc_key",
            pinecone_index="videos",
            supabase_url="https://test.supabase.co",
            supabase_key="test_key",
            openai_model="gpt-4o",
        )

        assert config.supadata_api_key == "sd_key"
        assert config.chunk_size == 80
        assert config.chunk_overlap == 20
        assert config.pinecone_index == "videos"
        assert config.openai_model == "gpt-4o"

    def test_config_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test config loads from environment variables."""
        monkeypatch.setenv("SUPADATA_API_KEY", "env_supadata")
        monkeypatch.setenv("TRANSCRIPT_CACHE_TTL_SECONDS", "120")
        monkeypatch.setenv("CHUNK_SIZE_WORDS", "100")
        monkeypatch.setenv("INDEX_TRANSCRIPT_SEGMENTS", "true")
        monkeypatch.setenv("GROQ_MODEL", "llama-3.1-8b-instant")

        config = StudyAssistantConfig()

        assert config.supadata_api_key == "env_supadata"
        assert config.transcript_cache_ttl_seconds == 120
        assert config.chunk_size == 100
        assert config.index_segments is True
        assert config.groq_model == "llama-3.1-8b-instant"

    def test_embedding_key_falls_back_to_gemini_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the server Gemini key is used for embeddings when no explicit key is set."""
        monkeypatch.delenv("EMBEDDING_API_KEY", raising=False)
        monkeypatch.setenv("GOOGLE_GEMINI_API", "gemini_server_key")

        config = StudyAssistantConfig()

        assert config.embedding_api_key == "gemini_server_key"

    def test_store_flags(self) -> None:
        """Test vector and notes store flags follow the credentials."""
        assert StudyAssistantConfig(pinecone_api_key="").vector_store_enabled is False
        assert StudyAssistantConfig(pinecone_api_key="key").vector_store_enabled is True
        assert (
            StudyAssistantConfig(supabase_url="https://x.supabase.co", supabase_key="")
            .notes_store_enabled
            is False
        )
        assert (
            StudyAssistantConfig(supabase_url="https://x.supabase.co", supabase_key="k")
            .notes_store_enabled
            is True
        )

    def test_get_config_returns_instance(self) -> None:
        """Test get_config returns a validated config."""
        assert isinstance(get_config(), StudyAssistantConfig)
