"""LLM and embedding provider factory.

Centralizes collaborator instantiation for both LangChain and direct SDK
paths.  Supports OpenAI and Azure OpenAI, switchable via LLM_PROVIDER.

Entry points:
- ``get_langchain_llm()`` -- chat model used by the duplicate detector
- ``get_embeddings()``    -- embedding model used by retrieval and ingestion
- ``ping_llm()``          -- minimal call for health checks
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from dupcheck.config import Config, get_config
from dupcheck.utils.logger import log_info


def _model_kwargs(config: Config) -> Dict[str, Any]:
    if config.openai_response_format == "json_object":
        return {"response_format": {"type": "json_object"}}
    return {}


# ── LangChain path ──────────────────────────────────────────────


def get_langchain_llm(config: Optional[Config] = None):
    """Return a LangChain chat model based on LLM_PROVIDER.

    For openai: ChatOpenAI.
    For azure:  AzureChatOpenAI against the configured chat deployment.
    Both request JSON-object output when OPENAI_RESPONSE_FORMAT=json_object.
    """
    config = config or get_config()

    if config.llm_provider == "azure":
        from langchain_openai import AzureChatOpenAI

        log_info("Using Azure OpenAI LLM", deployment=config.azure_chat_deployment)
        return AzureChatOpenAI(
            azure_endpoint=config.azure_openai_endpoint,
            azure_deployment=config.azure_chat_deployment,
            api_version=config.azure_openai_api_version,
            api_key=config.openai_api_key,
            temperature=config.openai_temperature,
            model_kwargs=_model_kwargs(config),
        )

    from langchain_openai import ChatOpenAI

    log_info("Using OpenAI LLM", model=config.openai_model)
    return ChatOpenAI(
        model=config.openai_model,
        api_key=config.openai_api_key,
        temperature=config.openai_temperature,
        model_kwargs=_model_kwargs(config),
    )


def get_embeddings(config: Optional[Config] = None):
    """Return a LangChain embeddings model based on LLM_PROVIDER."""
    config = config or get_config()

    if config.llm_provider == "azure":
        from langchain_openai import AzureOpenAIEmbeddings

        log_info("Using Azure OpenAI embeddings", deployment=config.azure_embedding_deployment)
        return AzureOpenAIEmbeddings(
            azure_endpoint=config.azure_openai_endpoint,
            azure_deployment=config.azure_embedding_deployment,
            api_version=config.azure_openai_api_version,
            api_key=config.openai_api_key,
        )

    from langchain_openai import OpenAIEmbeddings

    log_info("Using OpenAI embeddings", model=config.openai_embedding_model)
    return OpenAIEmbeddings(
        model=config.openai_embedding_model,
        api_key=config.openai_api_key,
    )


# ── Health check ─────────────────────────────────────────────────


def ping_llm(config: Optional[Config] = None) -> str:
    """Minimal chat call for health checking.

    Returns:
        Provider description string on success (e.g. "OpenAI (gpt-4o)").
    """
    config = config or get_config()

    if config.llm_provider == "azure":
        from openai import AzureOpenAI

        client = AzureOpenAI(
            azure_endpoint=config.azure_openai_endpoint,
            api_version=config.azure_openai_api_version,
            api_key=config.openai_api_key,
        )
        client.chat.completions.create(
            model=config.azure_chat_deployment,
            messages=[{"role": "user", "content": "ping"}],
            max_tokens=1,
        )
        return f"Azure OpenAI ({config.azure_chat_deployment})"

    from openai import OpenAI

    client = OpenAI(api_key=config.openai_api_key)
    client.chat.completions.create(
        model=config.openai_model,
        messages=[{"role": "user", "content": "ping"}],
        max_tokens=1,
    )
    return f"OpenAI ({config.openai_model})"
