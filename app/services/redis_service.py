import json
import logging
import uuid
import redis
from typing import Optional, Dict, Any
from datetime import datetime
from app.config.database import settings

logger = logging.getLogger("redis")

class ConversationStore:
    """Assistant conversations kept in Redis, expiring after the session TTL"""

    def __init__(self, redis_client: redis.Redis, ttl: Optional[int] = None, max_messages: int = 50):
        self.redis_client = redis_client
        self.default_ttl = ttl or settings.assistant_session_ttl
        self.max_messages = max_messages

    def _get_key(self, conversation_id: str) -> str:
        return f"assistant:conversation:{conversation_id}"

    def _save(self, conversation: Dict[str, Any]):
        self.redis_client.setex(
            self._get_key(conversation["id"]),
            self.default_ttl,
            json.dumps(conversation)
        )

    def create_conversation(self, user_id: int) -> Dict[str, Any]:
        now = datetime.now().isoformat()
        conversation = {
            "id": uuid.uuid4().hex,
            "user_id": user_id,
            "created_at": now,
            "updated_at": now,
            "messages": []
        }
        try:
            self._save(conversation)
        except redis.RedisError as e:
            logger.error(f"Error creating conversation for user {user_id}: {e}")
            raise
        logger.debug(f"Created conversation {conversation['id']}")
        return conversation

    def get_conversation(self, conversation_id: str) -> Optional[Dict[str, Any]]:
        data = self.redis_client.get(self._get_key(conversation_id))
        if data:
            return json.loads(data)
        return None

    def append_message(self, conversation: Dict[str, Any], role: str, content: str, **extra) -> Dict[str, Any]:
        message = {
            "role": role,
            "content": content,
            "timestamp": datetime.now().isoformat()
        }
        message.update(extra)

        conversation["messages"].append(message)
        conversation["messages"] = conversation["messages"][-self.max_messages:]
        conversation["updated_at"] = message["timestamp"]
        try:
            self._save(conversation)
        except redis.RedisError as e:
            logger.error(f"Error appending to conversation {conversation['id']}: {e}")
            raise
        return conversation

    def delete_conversation(self, conversation_id: str) -> bool:
        return bool(self.redis_client.delete(self._get_key(conversation_id)))
