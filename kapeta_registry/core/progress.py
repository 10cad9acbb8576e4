"""Progress reporting for long running operations"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, TypeVar

T = TypeVar('T')


class ProgressReporter(ABC):
    """Receives step by step progress from the push pipeline"""

    @abstractmethod
    def start(self, title: str) -> None:
        """A step started"""
        pass

    @abstractmethod
    def end(self, title: str, success: bool) -> None:
        """A step finished"""
        pass

    @abstractmethod
    def show_value(self, label: str, value: Any) -> None:
        pass

    @abstractmethod
    def info(self, message: str) -> None:
        pass

    @abstractmethod
    def warn(self, message: str) -> None:
        pass

    @abstractmethod
    def error(self, message: str) -> None:
        pass

    @abstractmethod
    def debug(self, message: str) -> None:
        pass

    def check(self, message: str, ok: bool) -> bool:
        """Report a yes/no check and return its outcome"""
        self.end(message, ok)
        return ok

    async def progress(self, title: str, awaitable: Awaitable[T]) -> T:
        """
        Await a step, reporting its start and outcome

        Args:
            title: Step title
            awaitable: Work to run

        Returns:
            Result of the awaitable
        """
        self.start(title)
        try:
            result = await awaitable
        except BaseException:
            self.end(title, False)
            raise
        self.end(title, True)
        return result


class LoggingProgressReporter(ProgressReporter):
    """Reports progress through the logging module"""

    def __init__(self, logger: logging.Logger = None):
        self.logger = logger or logging.getLogger("kapeta_registry.progress")

    def start(self, title: str) -> None:
        self.logger.info(f"{title}...")

    def end(self, title: str, success: bool) -> None:
        if success:
            self.logger.info(f"{title}: OK")
        else:
            self.logger.warning(f"{title}: FAILED")

    def show_value(self, label: str, value: Any) -> None:
        self.logger.info(f"{label}: {value}")

    def info(self, message: str) -> None:
        self.logger.info(message)

    def warn(self, message: str) -> None:
        self.logger.warning(message)

    def error(self, message: str) -> None:
        self.logger.error(message)

    def debug(self, message: str) -> None:
        self.logger.debug(message)
