"""
Root logger configuration.

Outputs:
    stdout - human-readable lines on stderr
    json   - one JSON object per line on stderr (for log shippers)
    none   - logging disabled
"""

import json
import logging

TEXT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


class JsonFormatter(logging.Formatter):

    def format(self, record):
        payload = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def configure_logging(level="INFO", output="stdout"):
    """Replace root handlers according to `output`. Unknown levels fall back to INFO."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    if output == "none":
        root.addHandler(logging.NullHandler())
        return

    handler = logging.StreamHandler()
    if output == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    root.addHandler(handler)

    resolved = logging.getLevelName(str(level).upper())
    root.setLevel(resolved if isinstance(resolved, int) else logging.INFO)
