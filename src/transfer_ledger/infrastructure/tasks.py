import json
from datetime import UTC, datetime
from typing import Any

import redis.asyncio as redis
import structlog
from ulid import ULID

from transfer_ledger.config import settings
from transfer_ledger.domain.models import User


logger = structlog.get_logger()


TASK_SEND_VERIFY_EMAIL = "task:send_verify_email"

QUEUE_CRITICAL = "critical"
QUEUE_DEFAULT = "default"


class RedisTaskDistributor:
    """
    Hands background tasks to workers through Redis lists.

    Each task is a JSON document pushed onto ``<prefix>:<queue>``. Consumers
    pop from the other end, so every queue is FIFO. Processing the tasks is
    the worker's concern; this class only enqueues them.
    """

    def __init__(
        self,
        url: str | None = None,
        queue_prefix: str | None = None,
        max_retry: int = 10,
    ) -> None:
        self._url = url or settings.redis_url
        self._queue_prefix = queue_prefix or settings.task_queue_prefix
        self._max_retry = max_retry
        self._client: redis.Redis | None = None

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            raise RuntimeError("Redis client not connected. Call connect() first.")
        return self._client

    async def connect(self) -> None:
        self._client = redis.from_url(
            self._url,
            encoding="utf-8",
            decode_responses=True,
        )
        await self._client.ping()
        logger.info("task_distributor_connected", url=self._url)

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("task_distributor_disconnected")

    def queue_key(self, queue: str) -> str:
        return f"{self._queue_prefix}:{queue}"

    async def distribute_task(
        self,
        task_type: str,
        payload: dict[str, Any],
        queue: str = QUEUE_DEFAULT,
    ) -> str:
        task_id = str(ULID())
        message = {
            "id": task_id,
            "type": task_type,
            "payload": payload,
            "max_retry": self._max_retry,
            "enqueued_at": datetime.now(UTC).isoformat(),
        }
        await self.client.lpush(self.queue_key(queue), json.dumps(message))
        logger.info("task_enqueued", task_id=task_id, task_type=task_type, queue=queue)
        return task_id

    async def distribute_send_verify_email(self, user: User) -> None:
        await self.distribute_task(
            TASK_SEND_VERIFY_EMAIL,
            {"username": user.username},
            queue=QUEUE_CRITICAL,
        )
