"""Loguru-style logging facade backed by stdlib logging + rich.

Usage::

    from compute_firewall.observability.logger import logger

    log = logger.bind(component="firewall", name="tcp-3000")
    log.info("Delete accepted, operation={op}", op="operation-123")
"""

from __future__ import annotations

import gzip
import inspect
import logging
import logging.handlers
import os
import shutil
import sys
from typing import TextIO

from rich.logging import RichHandler

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

ROOT_LOGGER_NAME = "compute_firewall"
DEFAULT_ROTATION_BYTES = 50 * 1024 * 1024

_root = logging.getLogger(ROOT_LOGGER_NAME)


def _caller_frame() -> inspect.FrameInfo:
    # First frame outside this module, whether called via BoundLogger or LoguruCompat.
    stack = inspect.stack(0)
    for info in stack[1:]:
        if info.frame.f_globals.get("__name__") != __name__:
            return info
    return stack[-1]


def _format_message(msg: str, args: tuple[object, ...], kwargs: dict[str, object]) -> str:
    if kwargs:
        return msg.format(**kwargs)
    if args:
        return msg.format(*args)
    return msg


def _format_context(extras: dict[str, object]) -> str:
    if not extras:
        return ""
    return " [" + " ".join(f"{k}={v}" for k, v in extras.items()) + "]"


class BoundLogger:
    __slots__ = ("_extras",)

    def __init__(self, extras: dict[str, object] | None = None) -> None:
        self._extras = extras or {}

    def bind(self, **kwargs: object) -> BoundLogger:
        return BoundLogger({**self._extras, **kwargs})

    def _log(self, level: int, message: str, /, *args: object, **kwargs: object) -> None:
        exc_info = kwargs.pop("exc_info", False)
        frame = _caller_frame()
        module = frame.frame.f_globals.get("__name__", ROOT_LOGGER_NAME)
        if not module.startswith(ROOT_LOGGER_NAME):
            module = ROOT_LOGGER_NAME
        target = logging.getLogger(module)
        if not target.isEnabledFor(level):
            return

        text = _format_message(message, args, kwargs) + _format_context(self._extras)
        record = target.makeRecord(
            name=target.name,
            level=level,
            fn=frame.filename,
            lno=frame.lineno,
            msg=text,
            args=(),
            exc_info=sys.exc_info() if exc_info else None,
            func=frame.function,
        )
        for k, v in self._extras.items():
            if not hasattr(record, k):
                setattr(record, k, v)
        record.extras = self._extras  # type: ignore[attr-defined]
        target.handle(record)

    def trace(self, message: str, /, *args: object, **kwargs: object) -> None:
        self._log(TRACE, message, *args, **kwargs)

    def debug(self, message: str, /, *args: object, **kwargs: object) -> None:
        self._log(logging.DEBUG, message, *args, **kwargs)

    def info(self, message: str, /, *args: object, **kwargs: object) -> None:
        self._log(logging.INFO, message, *args, **kwargs)

    def warning(self, message: str, /, *args: object, **kwargs: object) -> None:
        self._log(logging.WARNING, message, *args, **kwargs)

    def error(self, message: str, /, *args: object, **kwargs: object) -> None:
        self._log(logging.ERROR, message, *args, **kwargs)

    def exception(self, message: str, /, *args: object, **kwargs: object) -> None:
        kwargs["exc_info"] = True
        self._log(logging.ERROR, message, *args, **kwargs)


_handler_counter = 0
_handlers: dict[int, logging.Handler] = {}


def _gzip_namer(name: str) -> str:
    return name + ".gz"


def _gzip_rotator(source: str, dest: str) -> None:
    with open(source, "rb") as f_in, gzip.open(dest, "wb") as f_out:
        shutil.copyfileobj(f_in, f_out)
    os.remove(source)


def _parse_rotation_bytes(rotation: str) -> int:
    match rotation.strip().split():
        case [num, unit] if unit.upper() == "KB":
            return int(num) * 1024
        case [num, unit] if unit.upper() == "MB":
            return int(num) * 1024 * 1024
        case [num, unit] if unit.upper() == "GB":
            return int(num) * 1024 * 1024 * 1024
        case _:
            return DEFAULT_ROTATION_BYTES


def _make_file_handler(
    path: str,
    *,
    level: int,
    rotation: str | None,
    retention: int | None,
    compression: bool,
) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=_parse_rotation_bytes(rotation) if rotation else DEFAULT_ROTATION_BYTES,
        backupCount=retention if retention is not None else 10,
    )
    if compression:
        handler.namer = _gzip_namer
        handler.rotator = _gzip_rotator
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s.%(msecs)03d | %(levelname)-8s | "
        "%(name)s:%(funcName)s:%(lineno)d - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    return handler


def _make_console_handler(level: int, stream: TextIO | None) -> logging.Handler:
    from rich.console import Console

    handler = RichHandler(
        level=level,
        console=Console(file=stream) if stream is not None else None,
        show_time=True,
        show_level=True,
        show_path=True,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setLevel(level)
    return handler


class LoguruCompat:
    """Module-level logger mimicking the subset of loguru's API we rely on."""

    def __init__(self) -> None:
        self._bound = BoundLogger()

    def bind(self, **kwargs: object) -> BoundLogger:
        return self._bound.bind(**kwargs)

    def trace(self, message: str, /, *args: object, **kwargs: object) -> None:
        self._bound.trace(message, *args, **kwargs)

    def debug(self, message: str, /, *args: object, **kwargs: object) -> None:
        self._bound.debug(message, *args, **kwargs)

    def info(self, message: str, /, *args: object, **kwargs: object) -> None:
        self._bound.info(message, *args, **kwargs)

    def warning(self, message: str, /, *args: object, **kwargs: object) -> None:
        self._bound.warning(message, *args, **kwargs)

    def error(self, message: str, /, *args: object, **kwargs: object) -> None:
        self._bound.error(message, *args, **kwargs)

    def exception(self, message: str, /, *args: object, **kwargs: object) -> None:
        self._bound.exception(message, *args, **kwargs)

    def add(
        self,
        sink: str | TextIO,
        *,
        level: str = "DEBUG",
        rotation: str | None = None,
        retention: int | None = None,
        compression: bool = False,
    ) -> int:
        global _handler_counter
        numeric_level = logging.getLevelName(level.upper())
        if not isinstance(numeric_level, int):
            numeric_level = logging.DEBUG

        match sink:
            case str() as path:
                handler = _make_file_handler(
                    path,
                    level=numeric_level,
                    rotation=rotation,
                    retention=retention,
                    compression=compression,
                )
            case stream:
                handler = _make_console_handler(numeric_level, stream)

        _root.addHandler(handler)
        _handler_counter += 1
        _handlers[_handler_counter] = handler
        return _handler_counter

    def remove(self, handler_id: int | None = None) -> None:
        if handler_id is None:
            for h in list(_handlers.values()):
                _root.removeHandler(h)
                h.close()
            _handlers.clear()
            return
        if h := _handlers.pop(handler_id, None):
            _root.removeHandler(h)
            h.close()

    def enable(self, name: str = ROOT_LOGGER_NAME) -> None:
        target = logging.getLogger(name)
        target.disabled = False
        target.setLevel(TRACE)

    def disable(self, name: str = ROOT_LOGGER_NAME) -> None:
        logging.getLogger(name).disabled = True


logger = LoguruCompat()

_root.setLevel(TRACE)
_root.propagate = False
_root.addHandler(logging.NullHandler())
