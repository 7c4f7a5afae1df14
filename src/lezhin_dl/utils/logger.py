import sys
import traceback
from datetime import datetime

LEVELS = {"DEBUG": 10, "INFO": 20, "WARNING": 30, "ERROR": 40}


class Logger:
    def __init__(self):
        self.listeners = []
        self.debug_enabled = False

    def add_listener(self, callback):
        """
        Add a callback function that takes (level, message)
        """
        self.listeners.append(callback)

    def remove_listener(self, callback):
        if callback in self.listeners:
            self.listeners.remove(callback)

    def set_debug(self, enabled: bool):
        self.debug_enabled = enabled

    def log(self, level, message):
        if level == "DEBUG" and not self.debug_enabled:
            return
        timestamp = datetime.now().strftime("%H:%M:%S")
        formatted_message = f"[{timestamp}] [{level}] {message}"
        stream = sys.stderr if LEVELS[level] >= LEVELS["ERROR"] else sys.stdout
        print(formatted_message, file=stream)
        for listener in self.listeners:
            try:
                listener(level, formatted_message)
            except Exception:
                pass # Ignore listener errors

    def info(self, message):
        self.log("INFO", message)

    def warning(self, message):
        self.log("WARNING", message)

    def error(self, message):
        self.log("ERROR", message)

    def debug(self, message):
        self.log("DEBUG", message)

    def exception(self, message):
        """Logs an error followed by the traceback of the exception being handled."""
        self.log("ERROR", message)
        self.log("ERROR", traceback.format_exc().rstrip())


def file_listener(path: str):
    """Returns a listener appending every formatted line to ``path``."""
    def _write(level, message):
        with open(path, "a", encoding="utf-8") as f:
            f.write(message + "\n")
    return _write


# Global logger instance
logger = Logger()
