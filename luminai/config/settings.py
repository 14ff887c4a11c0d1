"""Application settings loaded from environment variables via pydantic-settings.

Configuration is read from two sources (in priority order):

  1. **Environment variables** -- e.g. ``OPENAI_API_KEY=sk-abc123``
  2. **.env file** -- key=value lines in the project root ``.env`` file

Field names map to upper-cased environment variables automatically
(``summary_group_max_chars`` <- ``SUMMARY_GROUP_MAX_CHARS``).  The pipeline
constants (fragment size, retrieval depth, group bound, acceptance
threshold, teardown trigger) are tunable here rather than hard-coded.
"""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

ANALYTICAL_QUERY = (
    "What is the key message in this document? Return chunks that explain "
    "the summary of the main content of the document."
)


class Settings(BaseSettings):
    """LuminAI application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # === Completion / vision service (OpenAI-compatible, OpenRouter by default) ===
    openai_api_key: str = ""
    openai_base_url: str = "https://openrouter.ai/api/v1"
    openai_text_model: str = "mistralai/mistral-7b-instruct"
    openai_vision_model: str = "meta-llama/llama-3.2-11b-vision-instruct"
    openai_app_title: str = "LuminAI"
    openai_app_referer: str = "http://localhost:3000"

    # === Embeddings ===
    # "openai" uses the OpenAI-compatible embeddings endpoint (needs
    # EMBEDDING_API_KEY or OPENAI_API_KEY); "sentence_transformer" runs locally.
    embedding_provider: Literal["openai", "sentence_transformer"] = "sentence_transformer"
    embedding_api_key: str = ""
    embedding_base_url: str = ""
    openai_embedding_model: str = "text-embedding-3-small"
    sentence_transformer_model: str = "sentence-transformers/all-MiniLM-L6-v2"

    # === Vector index ===
    chromadb_persist_dir: str = "./data/chromadb"
    chromadb_collection: str = "luminai_documents"

    # === Blob / metadata storage ===
    uploads_dir: str = "./public/uploads"
    metadata_dir: str = "./public/metadata"
    image_uploads_dir: str = "./public/uploads_img"
    image_metadata_dir: str = "./public/metadata_img"

    # === Fragmenting ===
    chunk_size: int = 1000
    chunk_overlap: int = 200

    # === Retrieval and grouping ===
    retrieval_query: str = ANALYTICAL_QUERY
    retrieval_top_k: int = 20
    summary_group_max_chars: int = 1800

    # === Summarization policy ===
    min_summary_length: int = 50
    # "always": tear down after any completed pass.
    # "on_success": tear down only when at least one group was summarized.
    teardown_policy: Literal["always", "on_success"] = "always"
    summary_temperature: float = 0.3

    # === Caption / quiz ===
    caption_max_attempts: int = 15
    caption_retry_delay: float = 1.0
    quiz_question_count: int = 3

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    def get_embedding_api_key(self) -> str:
        """Return the key used for the remote embeddings endpoint."""
        return self.embedding_api_key or self.openai_api_key

    def missing_service_keys(self) -> list[str]:
        """Return the names of required credentials that are not configured.

        The completion service always needs a key; the embeddings endpoint
        only does when the remote provider is selected.
        """
        missing: list[str] = []
        if not self.openai_api_key:
            missing.append("OPENAI_API_KEY")
        if self.embedding_provider == "openai" and not self.get_embedding_api_key():
            missing.append("EMBEDDING_API_KEY")
        return missing
