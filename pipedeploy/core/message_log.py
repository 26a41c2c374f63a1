import logging
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional

from .enums import MessageLevel


_LOGGING_LEVELS = {
    MessageLevel.INFO: logging.INFO,
    MessageLevel.WARN: logging.WARNING,
    MessageLevel.ERROR: logging.ERROR,
}


@dataclass(frozen=True)
class Message:
    """A single leveled diagnostic message"""
    level: MessageLevel
    text: str

    def render(self) -> str:
        return f"[{self.level.value}] {self.text}"


class MessageLog:
    """
    Ordered, append-only accumulator of deployment messages.

    Every message is kept in production order, forwarded to the module logger
    and, when a sink is given, written to the caller's stream as it arrives.
    """

    def __init__(self, sink: Optional[Callable[[str], None]] = None,
                 logger: Optional[logging.Logger] = None):
        self._messages: List[Message] = []
        self.sink = sink
        self.logger = logger or logging.getLogger(__name__)

    def add(self, level: MessageLevel, text: str) -> Message:
        message = Message(level=level, text=text)
        self._messages.append(message)
        self.logger.log(_LOGGING_LEVELS[level], text)
        if self.sink is not None:
            self.sink(message.render())
        return message

    def info(self, text: str) -> Message:
        return self.add(MessageLevel.INFO, text)

    def warn(self, text: str) -> Message:
        return self.add(MessageLevel.WARN, text)

    def error(self, text: str) -> Message:
        return self.add(MessageLevel.ERROR, text)

    @property
    def messages(self) -> List[Message]:
        return list(self._messages)

    def rendered(self) -> List[str]:
        """Messages as '[LEVEL] text' strings, in production order"""
        return [message.render() for message in self._messages]

    def by_level(self, level: MessageLevel) -> List[Message]:
        return [message for message in self._messages if message.level == level]

    def last_error(self) -> Optional[Message]:
        for message in reversed(self._messages):
            if message.level == MessageLevel.ERROR:
                return message
        return None

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(list(self._messages))
