"""Wire the responder from settings: Bedrock, SQL storage, DynamoDB history."""

from __future__ import annotations

from typing import Optional

from concierge.config.settings import Settings
from concierge.repositories.history_repo import DynamoDbHistoryRepository
from concierge.repositories.knowledge_repo import SqlKnowledgeRepository
from concierge.repositories.settings_repo import SqlSettingsRepository
from concierge.repositories.sql_repo import create_db_engine
from concierge.services.classification_service import IntentClassifier
from concierge.services.knowledge_service import KnowledgeService
from concierge.services.providers import BedrockProvider
from concierge.services.responder_service import ResponderService
from concierge.services.response_cache import ResponseCache


def build_responder(settings: Optional[Settings] = None) -> ResponderService:
    settings = settings or Settings.from_environment()
    provider = BedrockProvider(
        model_id=settings.model_id,
        embedding_model_id=settings.embedding_model_id,
        region=settings.aws_region,
    )
    engine = create_db_engine(settings.database_url)
    cache = (
        ResponseCache(ttl_seconds=settings.cache_ttl_seconds, max_size=settings.cache_max_size)
        if settings.cache_enabled
        else None
    )

    return ResponderService(
        provider=provider,
        history=DynamoDbHistoryRepository(settings.history_table),
        settings=SqlSettingsRepository(engine),
        knowledge=KnowledgeService(provider, repository=SqlKnowledgeRepository(engine)),
        classifier=IntentClassifier(provider),
        cache=cache,
        max_context_messages=settings.max_context_messages,
        max_knowledge_results=settings.max_knowledge_results,
        min_knowledge_similarity=settings.min_knowledge_similarity,
        max_tokens=settings.completion_max_tokens,
        temperature=settings.completion_temperature,
        serialize_per_conversation=settings.serialize_per_conversation,
    )
