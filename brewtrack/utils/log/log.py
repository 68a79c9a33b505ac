import logging
import json
from datetime import datetime
from datetime import timezone


class JsonFormatter(logging.Formatter):
    def format(self, record):
        log_obj = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
            "details": record.args if record.args else None,
        }
        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_obj, default=str)


def setup_logger(level="INFO"):
    logger = logging.getLogger()
    if not logger.hasHandlers():  # only once, even with several app instances
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
        logger.setLevel(level)
        logger.addHandler(handler)
    return logger
