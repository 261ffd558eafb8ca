"""Readers for Server-Sent Events streams of JSON payloads."""

from __future__ import annotations

import json
from typing import Any, Callable, Generic, Iterable, Iterator, Optional, TypeVar

T = TypeVar("T")


class EndOfStream(Exception):
    """Raised by ``read`` when the stream has no further events."""


class IncompleteStreamError(Exception):
    """Raised when the stream ends without a ``[DONE]`` marker."""

    def __init__(self) -> None:
        super().__init__("incomplete stream")


class UnexpectedEventError(ValueError):
    """Raised when a field other than ``data`` appears in the stream."""

    def __init__(self, event_type: str) -> None:
        self.event_type = event_type
        super().__init__(f"unexpected event type: {event_type}")


class EventReader(Generic[T]):
    """Reads JSON events from a line-oriented SSE stream.

    ``decode`` turns each parsed JSON value into the event type; without it
    the parsed JSON value itself is returned.
    """

    def __init__(
        self, stream: Any, decode: Optional[Callable[[Any], T]] = None
    ) -> None:
        self._stream = stream
        self._decode = decode

    def read(self) -> T:
        """Return the next event; raise EndOfStream once ``[DONE]`` is seen."""
        while True:
            raw = self._stream.readline()
            if not raw:
                raise IncompleteStreamError()
            line = raw.decode("utf-8") if isinstance(raw, bytes) else raw
            line = line.removesuffix("\n").removesuffix("\r")

            if not line or line.startswith(":"):
                continue

            field, sep, value = line.partition(":")
            if not sep:
                continue
            field, value = field.strip(), value.strip()
            if field != "data":
                raise UnexpectedEventError(field)
            if value == "[DONE]":
                raise EndOfStream()
            payload = json.loads(value)
            if self._decode is None:
                return payload
            return self._decode(payload)

    def close(self) -> None:
        self._stream.close()

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                event = self.read()
            except EndOfStream:
                return
            yield event

    def __enter__(self) -> "EventReader[T]":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class StaticEventReader(Generic[T]):
    """Serves a fixed list of events through the same interface as EventReader."""

    def __init__(self, events: Iterable[T]) -> None:
        self._events = iter(list(events))

    def read(self) -> T:
        try:
            return next(self._events)
        except StopIteration:
            raise EndOfStream() from None

    def close(self) -> None:
        self._events = iter(())

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                event = self.read()
            except EndOfStream:
                return
            yield event

    def __enter__(self) -> "StaticEventReader[T]":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()