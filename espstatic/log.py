import sys


def log_message(message):
    print(
        "ESP32 static files: " + message,
        flush=True,
    )


def log_error(message):
    print(
        "ESP32 static files: " + message,
        file=sys.stderr,
        flush=True,
    )


class Trace:
    """Per-file progress lines, only printed when logging is enabled."""

    def __init__(self, enabled: bool = False):
        self.enabled = enabled

    def __call__(self, message):
        if self.enabled:
            log_message(message)
