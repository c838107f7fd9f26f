# setukpa/workers/queue.py
"""
Redis/RQ plumbing. The API process only enqueues; `worker_main` consumes.
"""

from typing import Any, Callable, Optional

from redis import Redis
from rq import Queue, Retry

from setukpa.core.config import settings

_redis_conn: Optional[Redis] = None


def get_redis_connection() -> Redis:
    global _redis_conn
    if _redis_conn is None:
        _redis_conn = Redis.from_url(settings.REDIS_URL)
    return _redis_conn


def get_queue(name: str) -> Queue:
    return Queue(name, connection=get_redis_connection())


def enqueue_job(
    func: Callable[..., Any],
    *args: Any,
    queue_name: str,
    retries: int = 0,
    **kwargs: Any,
) -> str:
    q = get_queue(queue_name)
    if retries:
        kwargs["retry"] = Retry(max=retries)
    job = q.enqueue(func, *args, **kwargs)
    return job.id


def enqueue_notification_task(payload: dict) -> str:
    from setukpa.workers.tasks import notification_task

    return enqueue_job(
        notification_task,
        payload,
        queue_name=settings.NOTIFICATION_QUEUE,
        retries=settings.NOTIFICATION_MAX_RETRIES,
    )
