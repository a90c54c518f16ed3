from __future__ import annotations

import logging
import time

_LAST_WARNED: dict[tuple[str, str], float] = {}
_MAX_CODES = 1024


def warn_once(logger: logging.Logger, code: str, message: str, window: float = 60) -> None:
    """Log a warning once per time window for a given logger and code.

    Retry loops call this on every failed attempt; the cache is capped and the
    oldest entries are dropped first.
    """
    now = time.monotonic()
    key = (logger.name, code)
    last = _LAST_WARNED.get(key)
    if last is not None and now - last <= window:
        logger.debug("%s: %s", code, message)
        return
    if len(_LAST_WARNED) >= _MAX_CODES:
        oldest = min(_LAST_WARNED, key=_LAST_WARNED.__getitem__)
        _LAST_WARNED.pop(oldest, None)
    _LAST_WARNED[key] = now
    logger.warning("%s: %s", code, message)


def reset_warnings() -> None:
    _LAST_WARNED.clear()
