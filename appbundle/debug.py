import time
import threading
from contextlib import ContextDecorator
from functools import wraps
from appbundle.env import verbose, log_level

LOG_LEVELS = {
    'debug': 0,
    'info': 1,
    'warn': 2,
    'error': 3,
    'critical': 4,
}

class debug(ContextDecorator):
    def __init__(self, name: str):
        self.name = name

    def __enter__(self):
        if verbose():
            self.start = time.monotonic()
        return self

    def __exit__(self, _exc_type, _exc, _tb):
        if verbose():
            end = time.monotonic()
            res = getattr(self, 'result', None)
            log(f"{self.name} ({(end - self.start)*1000:.0f} ms): {res!r}", 'debug')
        return False

    def __call__(self, func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if not verbose():
                return func(*args, **kwargs)

            start = time.monotonic()
            result = func(*args, **kwargs)
            end = time.monotonic()
            log(f"{self.name} - {args} ({(end - start)*1000:.0f} ms): {result!r}", 'debug')
            return result

        return wrapper

def log(message, level='info'):
    # Unknown LOG_LEVEL values behave like 'info'
    threshold = LOG_LEVELS.get(log_level(), LOG_LEVELS['info'])
    if LOG_LEVELS[level] >= threshold:
        print(f"[{level.upper()}][thread#{threading.get_native_id()}] {message}")
