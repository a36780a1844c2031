"""Shared fixtures."""

import pytest


class RecordingOutputHandler:
    """Keeps (level, message, indent) records instead of printing them."""

    def __init__(self):
        self.messages: list[tuple[str, str, int]] = []

    def info(self, message: str, indent: int = 0) -> None:
        self.messages.append(('info', message, indent))

    def success(self, message: str, indent: int = 0) -> None:
        self.messages.append(('success', message, indent))

    def warning(self, message: str, indent: int = 0) -> None:
        self.messages.append(('warning', message, indent))

    def error(self, message: str, indent: int = 0) -> None:
        self.messages.append(('error', message, indent))

    def line(self, message: str, level: str = 'info', indent: int = 0) -> None:
        self.messages.append((level, message, indent))

    def section(self, title: str) -> None:
        self.messages.append(('info', title, 0))

    def debug(self, message: str) -> None:
        pass

    def status(self, message: str, label: str, level: str = 'info', dashes: bool = False) -> None:
        self.messages.append((level, f"{message} [{label}]", 0))

    def texts(self) -> list[str]:
        return [message for _, message, _ in self.messages]


@pytest.fixture
def output() -> RecordingOutputHandler:
    return RecordingOutputHandler()
