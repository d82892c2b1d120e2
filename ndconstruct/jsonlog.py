"""
Structured JSON-lines event records for the command line tool.

Each record carries a timestamp, an event name and arbitrary fields:
    {"ts": 1640995200.0, "event": "describe", "shape": [2, 2], "dtype": "int32"}
"""

import json, sys, time


def log(event: str, stream=None, **fields):
    """
    Write one JSON event record and flush.

    Args:
        event: Event name (e.g. "describe", "build_done", "error")
        stream: Target file object; stdout when None
        **fields: Additional key-value pairs to include in the record
    """
    stream = stream or sys.stdout
    rec = {"ts": time.time(), "event": event}
    rec.update(fields)
    stream.write(json.dumps(rec, default=str) + "\n")
    stream.flush()
