import functools
import logging
import time


def timing(f):
    "Decorator to log the time spent in a function."

    @functools.wraps(f)
    def wrap(*args, **kw):
        ts = time.perf_counter()
        try:
            return f(*args, **kw)
        finally:
            te = time.perf_counter()
            logging.debug("func: %r args: %r took: %2.4f sec", f.__name__, args, te - ts)

    return wrap
