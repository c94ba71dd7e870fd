"""Tests for the LLM and embedding provider factory."""

import pytest
from unittest.mock import Mock, patch

from dupcheck.llm_factory import get_embeddings, get_langchain_llm, ping_llm


@pytest.fixture
def azure_config(test_config):
    return test_config.model_copy(update={
        "llm_provider": "azure",
        "azure_openai_endpoint": "https://example.openai.azure.com",
        "azure_chat_deployment": "gpt-4o-dup",
        "azure_embedding_deployment": "embed-small",
    })


class TestGetLangchainLlm:
    @patch("langchain_openai.ChatOpenAI")
    def test_openai_json_mode(self, mock_chat_openai, test_config):
        get_langchain_llm(test_config)

        kwargs = mock_chat_openai.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["temperature"] == 0.0
        assert kwargs["model_kwargs"] == {"response_format": {"type": "json_object"}}

    @patch("langchain_openai.ChatOpenAI")
    def test_text_mode_has_no_response_format(self, mock_chat_openai, test_config):
        config = test_config.model_copy(update={"openai_response_format": "text"})
        get_langchain_llm(config)
        assert mock_chat_openai.call_args.kwargs["model_kwargs"] == {}

    @patch("langchain_openai.AzureChatOpenAI")
    def test_azure(self, mock_azure, azure_config):
        get_langchain_llm(azure_config)

        kwargs = mock_azure.call_args.kwargs
        assert kwargs["azure_deployment"] == "gpt-4o-dup"
        assert kwargs["azure_endpoint"] == "https://example.openai.azure.com"
        assert kwargs["temperature"] == 0.0
        assert kwargs["model_kwargs"] == {"response_format": {"type": "json_object"}}

    @patch("langchain_openai.ChatOpenAI")
    def test_uses_global_config_by_default(self, mock_chat_openai, test_config):
        with patch("dupcheck.llm_factory.get_config", return_value=test_config):
            get_langchain_llm()
        mock_chat_openai.assert_called_once()


class TestGetEmbeddings:
    @patch("langchain_openai.OpenAIEmbeddings")
    def test_openai(self, mock_embeddings, test_config):
        get_embeddings(test_config)
        assert mock_embeddings.call_args.kwargs["model"] == "text-embedding-3-small"

    @patch("langchain_openai.AzureOpenAIEmbeddings")
    def test_azure(self, mock_embeddings, azure_config):
        get_embeddings(azure_config)
        assert mock_embeddings.call_args.kwargs["azure_deployment"] == "embed-small"


class TestPingLlm:
    @patch("openai.OpenAI")
    def test_openai_ping(self, mock_openai_cls, test_config):
        result = ping_llm(test_config)

        create = mock_openai_cls.return_value.chat.completions.create
        create.assert_called_once()
        assert create.call_args.kwargs["max_tokens"] == 1
        assert result == "OpenAI (gpt-4o)"

    @patch("openai.AzureOpenAI")
    def test_azure_ping(self, mock_azure_cls, azure_config):
        result = ping_llm(azure_config)
        assert mock_azure_cls.return_value.chat.completions.create.call_args.kwargs["model"] == "gpt-4o-dup"
        assert result == "Azure OpenAI (gpt-4o-dup)"

    @patch("openai.OpenAI")
    def test_ping_error_propagates(self, mock_openai_cls, test_config):
        mock_openai_cls.return_value.chat.completions.create.side_effect = RuntimeError("401")
        with pytest.raises(RuntimeError):
            ping_llm(test_config)
