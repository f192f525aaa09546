"""
Environment-specific configuration settings.

Defaults suit local development; production overrides live in
``Settings.from_environment``.
"""

from dataclasses import dataclass
import os


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() == "true"


@dataclass
class Settings:
    """Application settings for the reply engine."""

    # Environment
    environment: str = "dev"
    aws_region: str = "eu-west-2"

    # Bedrock Configuration
    model_id: str = "anthropic.claude-3-haiku-20240307-v1:0"
    embedding_model_id: str = "amazon.titan-embed-text-v2:0"

    # Storage
    database_url: str = "sqlite:///./data/concierge.db"
    history_table: str = "conversation-messages"

    # Responder
    max_context_messages: int = 10
    max_knowledge_results: int = 3
    min_knowledge_similarity: float = 0.3
    completion_max_tokens: int = 500
    completion_temperature: float = 0.7
    serialize_per_conversation: bool = False

    # Cache Configuration
    cache_enabled: bool = True
    cache_ttl_seconds: int = 3600
    cache_max_size: int = 500

    @classmethod
    def from_environment(cls) -> "Settings":
        """Load settings from environment variables."""
        env = os.environ.get("ENVIRONMENT", "dev")
        region = (
            os.environ.get("BEDROCK_REGION")
            or os.environ.get("AWS_REGION")
            or cls.aws_region
        )
        values = dict(
            environment=env,
            aws_region=region,
            model_id=os.environ.get("MODEL_ID", cls.model_id),
            embedding_model_id=os.environ.get("EMBEDDING_MODEL_ID", cls.embedding_model_id),
            database_url=os.environ.get("DATABASE_URL", cls.database_url),
            history_table=os.environ.get("HISTORY_TABLE", cls.history_table),
            max_context_messages=int(os.environ.get("MAX_CONTEXT_MESSAGES", "10")),
            max_knowledge_results=int(os.environ.get("MAX_KNOWLEDGE_RESULTS", "3")),
            min_knowledge_similarity=float(os.environ.get("MIN_KNOWLEDGE_SIMILARITY", "0.3")),
            completion_max_tokens=int(os.environ.get("COMPLETION_MAX_TOKENS", "500")),
            completion_temperature=float(os.environ.get("COMPLETION_TEMPERATURE", "0.7")),
            serialize_per_conversation=_env_bool("SERIALIZE_PER_CONVERSATION", "false"),
            cache_enabled=_env_bool("CACHE_ENABLED", "true"),
            cache_ttl_seconds=int(os.environ.get("CACHE_TTL_SECONDS", "3600")),
            cache_max_size=int(os.environ.get("CACHE_MAX_SIZE", "500")),
        )

        # Production overrides
        if env == "prod":
            values.update(
                model_id=os.environ.get("MODEL_ID", "anthropic.claude-3-5-sonnet-20240620-v1:0"),
                cache_max_size=int(os.environ.get("CACHE_MAX_SIZE", "2000")),
            )

        return cls(**values)
