"""Configuration management using Pydantic BaseSettings.

This module provides centralized configuration management with validation,
type safety, and sensible defaults for dupcheck.  Core components never read
the environment themselves; ``main.py`` builds them from ``get_config()``
once at startup.
"""
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

_SETTINGS = {
    "env_file": ".env",
    "env_file_encoding": "utf-8",
    "case_sensitive": False,
    "extra": "ignore",
}

VALID_PROVIDERS = ("openai", "azure")
VALID_RESPONSE_FORMATS = ("json_object", "text")
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _check_provider(v: str) -> str:
    if v.lower() not in VALID_PROVIDERS:
        raise ValueError(f'llm_provider must be one of {VALID_PROVIDERS}')
    return v.lower()


def _check_response_format(v: str) -> str:
    if v not in VALID_RESPONSE_FORMATS:
        raise ValueError('response_format must be "json_object" or "text"')
    return v


def _check_log_level(v: str) -> str:
    if v.upper() not in VALID_LOG_LEVELS:
        raise ValueError(f'Invalid log level: {v}. Valid options: {list(VALID_LOG_LEVELS)}')
    return v.upper()


class Config(BaseSettings):
    """Main configuration class combining all settings."""

    # LLM provider
    llm_provider: str = Field("openai", description="openai or azure")

    # OpenAI Configuration
    openai_api_key: str = Field("", description="OpenAI or Azure OpenAI API key")
    openai_model: str = Field("gpt-4o", description="Chat model used for adjudication")
    openai_embedding_model: str = Field("text-embedding-3-small", description="Embedding model")
    openai_temperature: float = Field(0.0, ge=0.0, le=2.0, description="Model temperature")
    openai_response_format: str = Field("json_object", description="Response format")

    # Azure OpenAI Configuration
    azure_openai_endpoint: str = Field("", description="Azure OpenAI endpoint URL")
    azure_openai_api_version: str = Field("2024-06-01", description="Azure OpenAI API version")
    azure_chat_deployment: str = Field("gpt-4o", description="Chat deployment name")
    azure_embedding_deployment: str = Field("text-embedding-3-small-1", description="Embedding deployment name")

    # Weaviate Configuration
    weaviate_host: str = Field("localhost", description="Weaviate host")
    weaviate_http_port: int = Field(8080, ge=1, le=65535, description="Weaviate HTTP port")
    weaviate_grpc_port: int = Field(50051, ge=1, le=65535, description="Weaviate gRPC port")
    weaviate_api_key: str = Field("", description="Weaviate API key (optional)")
    collection_name: str = Field("BugzillaDefect", description="Defect collection name")

    # Retrieval Configuration
    retrieval_min_similarity: float = Field(0.4, ge=0.0, le=1.0, description="Minimum similarity for retrieved defects")
    retrieval_limit: int = Field(5, ge=1, le=100, description="Maximum number of retrieved defects")
    duplicate_confidence_threshold: float = Field(0.8, ge=0.0, le=1.0, description="Confidence a duplicate verdict should exceed")

    # Output
    reports_dir: str = Field("reports", description="Directory for duplicate reports")

    # Logging Configuration
    log_level: str = Field("INFO", description="Logging level")
    log_format: str = Field("%(asctime)s - %(name)s - %(levelname)s - %(message)s", description="Log format")

    model_config = _SETTINGS

    @field_validator('llm_provider')
    @classmethod
    def validate_provider(cls, v):
        return _check_provider(v)

    @field_validator('openai_response_format')
    @classmethod
    def validate_response_format(cls, v):
        return _check_response_format(v)

    @field_validator('log_level')
    @classmethod
    def validate_level(cls, v):
        return _check_log_level(v)

    @property
    def retrieval_max_distance(self) -> float:
        """Distance cutoff passed to the vector store (similarity = 1 - distance)."""
        return 1.0 - self.retrieval_min_similarity

    def validate_configuration(self) -> List[str]:
        """Validate the complete configuration and return any issues."""
        issues = []

        if not self.openai_api_key:
            issues.append("OPENAI_API_KEY is required")
        if self.llm_provider == "azure" and not self.azure_openai_endpoint:
            issues.append("AZURE_OPENAI_ENDPOINT is required when LLM_PROVIDER=azure")
        if not self.collection_name:
            issues.append("COLLECTION_NAME is required")

        if self.openai_response_format != "json_object":
            issues.append("OPENAI_RESPONSE_FORMAT=text disables JSON mode; reports may fail to parse")

        if self.retrieval_min_similarity < 0.2:
            issues.append("RETRIEVAL_MIN_SIMILARITY is very low, unrelated defects will flood the context")

        if self.openai_temperature > 0.0:
            issues.append("OPENAI_TEMPERATURE > 0 makes duplicate verdicts non-deterministic")

        return issues

    def log_configuration(self) -> None:
        """Log the current configuration (sanitized)."""
        from dupcheck.utils.logger import log_info

        log_info("Configuration loaded",
                 llm_provider=self.llm_provider,
                 model=self.openai_model if self.llm_provider == "openai" else self.azure_chat_deployment,
                 weaviate_host=self.weaviate_host,
                 collection=self.collection_name,
                 min_similarity=self.retrieval_min_similarity,
                 max_distance=round(self.retrieval_max_distance, 4),
                 limit=self.retrieval_limit,
                 log_level=self.log_level)


# Global configuration instance (lazy loading)
_config = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> Config:
    """Reload configuration from environment variables."""
    global _config
    _config = Config()
    return _config
