"""Decorator for logging and timing the slow computations."""

import inspect
import logging
import time
from functools import wraps
from typing import Any, Callable, Dict

# Parameters whose values are too bulky to log verbatim
_SUMMARIZED = (list, tuple, dict, set)


def _summarize(value: Any) -> Any:
    if isinstance(value, _SUMMARIZED) and len(value) > 10:
        return f"<{type(value).__name__} of {len(value)}>"
    return value


def log_calls(func: Callable) -> Callable:
    """
    Log start, completion time and failure of a computation.

    Start and completion go out at DEBUG on the wrapped function's module
    logger; failures go out at ERROR and the exception is re-raised.
    """
    logger = logging.getLogger(func.__module__)
    sig = inspect.signature(func)

    @wraps(func)
    def wrapper(*args, **kwargs):
        function = func.__qualname__
        input_params: Dict[str, Any] = {}

        if logger.isEnabledFor(logging.DEBUG):
            bound = sig.bind_partial(*args, **kwargs)
            input_params = {
                name: _summarize(value)
                for name, value in bound.arguments.items()
                if name != "rng"
            }
            logger.debug(
                f"{function} started",
                extra={"function": function, "input_params": input_params},
            )

        start_time = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            execution_time_ms = int((time.perf_counter() - start_time) * 1000)
            logger.error(
                f"{function} failed with error: {e}",
                extra={
                    "function": function,
                    "input_params": input_params or None,
                    "execution_time_ms": execution_time_ms,
                    "success": False,
                    "error": str(e),
                },
            )
            raise

        execution_time_ms = int((time.perf_counter() - start_time) * 1000)
        logger.debug(
            f"{function} completed in {execution_time_ms} ms",
            extra={
                "function": function,
                "execution_time_ms": execution_time_ms,
                "success": True,
            },
        )
        return result

    return wrapper
