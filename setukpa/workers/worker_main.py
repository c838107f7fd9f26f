# setukpa/workers/worker_main.py
import logging

from rq import Queue, SimpleWorker

from setukpa.core.config import settings
from setukpa.core.logging_config import setup_logging
from setukpa.workers.queue import get_redis_connection

logger = logging.getLogger(__name__)


def main():
    setup_logging()
    redis_conn = get_redis_connection()

    queues = [Queue(settings.NOTIFICATION_QUEUE, connection=redis_conn)]
    logger.info(f"Worker listening on {[q.name for q in queues]}")

    # SimpleWorker runs jobs in-process, so SQLAlchemy sessions are not forked
    SimpleWorker(queues, connection=redis_conn).work()


if __name__ == "__main__":
    main()
