#!/usr/bin/env python3
"""Import knowledge entries from a JSON file and embed them with Bedrock."""

import argparse
import json
import sys

from pydantic import TypeAdapter

from concierge.config.settings import Settings
from concierge.models.knowledge import KnowledgeItemCreate
from concierge.repositories.knowledge_repo import SqlKnowledgeRepository
from concierge.repositories.sql_repo import create_db_engine
from concierge.services.knowledge_service import KnowledgeService
from concierge.services.providers import BedrockProvider
from concierge.utils.error_handling import RetrievalError


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("path", help="JSON file holding a list of knowledge entries")
    parser.add_argument("--reindex", action="store_true", help="re-embed entries missing a vector afterwards")
    args = parser.parse_args()

    settings = Settings.from_environment()
    try:
        with open(args.path, encoding="utf-8") as handle:
            entries = TypeAdapter(list[KnowledgeItemCreate]).validate_python(json.load(handle))
    except (OSError, ValueError) as e:
        print(f"Error reading {args.path}: {e}")
        sys.exit(1)

    provider = BedrockProvider(
        model_id=settings.model_id,
        embedding_model_id=settings.embedding_model_id,
        region=settings.aws_region,
    )
    repository = SqlKnowledgeRepository(create_db_engine(settings.database_url))
    service = KnowledgeService(provider, repository=repository)

    print(f"Importing {len(entries)} entries into {settings.database_url}")
    failed = 0
    for entry in entries:
        try:
            item = service.add(entry)
            print(f"  added {item.id}: {item.title}")
        except RetrievalError as e:
            failed += 1
            print(f"  stored without embedding: {entry.title} ({e})")

    if args.reindex and failed:
        print(f"Re-embedded {service.reindex(missing_only=True)} entries")

    stats = service.get_stats()
    print(f"Done: {stats.total_items} entries, {stats.has_embeddings} embedded")


if __name__ == "__main__":
    main()
