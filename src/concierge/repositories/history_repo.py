"""Conversation history accessor backed by DynamoDB."""

from typing import List, Protocol

import boto3
from boto3.dynamodb.conditions import Key

from concierge.models.conversation import HistoryMessage


class HistoryAccessor(Protocol):
    def get_messages(self, conversation_id: str, limit: int = 10) -> List[HistoryMessage]:
        """Most recent ``limit`` turns, oldest first."""
        ...


class DynamoDbHistoryRepository:
    """Read recent turns from the conversation messages table."""

    def __init__(self, table_name: str, resource=None):
        self.table = (resource or boto3.resource("dynamodb")).Table(table_name)

    def get_messages(self, conversation_id: str, limit: int = 10) -> List[HistoryMessage]:
        resp = self.table.query(
            KeyConditionExpression=Key("conversation_id").eq(conversation_id),
            ScanIndexForward=False,
            Limit=limit,
        )
        items = resp.get("Items", [])
        # Query returns newest first; the prompt wants oldest first.
        return [
            HistoryMessage(direction=item["direction"], content=item["content"])
            for item in reversed(items)
        ]
