import logging
import logging.handlers
import os
from queue import Queue
from typing import Any, Dict, Optional, Tuple

LOG_DIR = "logs"
LOG_FILENAME = "judge.log"
USER_EVENTS_LOGGER = "app.user_events"

# Events that mean the user saw a transient failure; everything else is routine.
WARNING_EVENTS = frozenset({"run_error", "submission_runner_error", "submission_record_failed"})


class UserEventFormatter(logging.Formatter):
    """
    Renders ``log_user_event`` records as ``event | user | key=value ...`` lines.

    Records without a user event fall back to the plain format.
    """

    def __init__(self):
        super().__init__('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    def format(self, record: logging.LogRecord) -> str:
        event = getattr(record, "user_event", None)
        if event is None:
            return super().format(record)
        fields = " ".join(f"{key}={value!r}" for key, value in sorted(event["details"].items()))
        line = f"{event['event_type']} | {event['user_email'] or '-'}"
        if fields:
            line = f"{line} | {fields}"
        return f"{self.formatTime(record)} - {record.levelname} - {line}"


def setup_log_queue_handler() -> Tuple[logging.Handler, logging.handlers.QueueListener]:
    """Routes root logging through a queue to a rotating file; the caller starts the listener."""
    os.makedirs(LOG_DIR, exist_ok=True)
    file_handler = logging.handlers.RotatingFileHandler(
        os.path.join(LOG_DIR, LOG_FILENAME), maxBytes=10 * 1024 * 1024, backupCount=5
    )
    file_handler.setFormatter(UserEventFormatter())

    log_queue = Queue(-1)
    queue_handler = logging.handlers.QueueHandler(log_queue)
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)
    root_logger.addHandler(queue_handler)

    listener = logging.handlers.QueueListener(log_queue, file_handler, respect_handler_level=True)
    return queue_handler, listener


def teardown_log_queue_handler(queue_handler: logging.Handler, listener: logging.handlers.QueueListener):
    listener.stop()
    logging.getLogger().removeHandler(queue_handler)


def log_user_event(user_email: Optional[str], event_type: str, details: Optional[Dict[str, Any]] = None):
    event = {
        "user_email": user_email,
        "event_type": event_type,
        "details": details or {},
    }
    level = logging.WARNING if event_type in WARNING_EVENTS else logging.INFO
    logging.getLogger(USER_EVENTS_LOGGER).log(level, "%s for %s", event_type, user_email,
                                              extra={"user_event": event})
