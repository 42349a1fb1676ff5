import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Toast:
    title: str
    description: str
    variant: str = "default"


class Notifier:
    """Collects user-facing toasts and mirrors them to the log."""

    def __init__(self) -> None:
        self.toasts: list[Toast] = []

    def success(self, description: str, title: str = "Success") -> Toast:
        return self._push(Toast(title, description))

    def info(self, title: str, description: str) -> Toast:
        return self._push(Toast(title, description))

    def error(self, description: str, title: str = "Error") -> Toast:
        return self._push(Toast(title, description, variant="destructive"))

    @property
    def last(self) -> Toast | None:
        return self.toasts[-1] if self.toasts else None

    def _push(self, toast: Toast) -> Toast:
        self.toasts.append(toast)
        level = logging.WARNING if toast.variant == "destructive" else logging.INFO
        logger.log(level, "%s: %s", toast.title, toast.description)
        return toast
