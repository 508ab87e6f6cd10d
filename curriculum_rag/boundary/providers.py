"""
Default model providers.

Builds the Google Generative AI chat and embedding models used when no
provider is injected. Every consumer depends only on the LangChain
interfaces (BaseChatModel, Embeddings), so tests and alternative
deployments can pass any implementation.

Dependencies: langchain_google_genai, curriculum_rag.configs
System role: Provider factory for embeddings, synthesis and scoring
"""

import logging

from langchain_core.embeddings import Embeddings
from langchain_core.language_models import BaseChatModel
from langchain_google_genai import ChatGoogleGenerativeAI, GoogleGenerativeAIEmbeddings

from curriculum_rag.configs.providers import ProviderSettings

logger = logging.getLogger(__name__)


def build_embeddings(settings: ProviderSettings) -> Embeddings:
    """
    Create the default embedding model.

    Args:
        settings: Provider configuration

    Returns:
        Embeddings implementation
    """
    logger.info(f"{__name__}:build_embeddings - model={settings.embedding_model}")
    return GoogleGenerativeAIEmbeddings(model=settings.embedding_model)


def build_chat_model(model_name: str, settings: ProviderSettings) -> BaseChatModel:
    """
    Create a chat model for synthesis or scoring.

    Args:
        model_name: Provider model identifier
        settings: Provider configuration (temperature)

    Returns:
        Chat model implementation
    """
    logger.info(f"{__name__}:build_chat_model - model={model_name}")
    return ChatGoogleGenerativeAI(model=model_name, temperature=settings.temperature)
