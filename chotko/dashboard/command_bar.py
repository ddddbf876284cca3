"""Single-line input bar at the bottom of the dashboard."""

from __future__ import annotations

from enum import Enum


class TextInput:
    """Minimal line editor driven by normalized key names."""

    def __init__(self, value: str = "") -> None:
        self.value = value
        self.pos = len(value)

    def handle_key(self, key: str) -> bool:
        if key == "backspace":
            if self.pos > 0:
                self.value = self.value[: self.pos - 1] + self.value[self.pos :]
                self.pos -= 1
        elif key == "delete":
            self.value = self.value[: self.pos] + self.value[self.pos + 1 :]
        elif key == "left":
            self.pos = max(self.pos - 1, 0)
        elif key == "right":
            self.pos = min(self.pos + 1, len(self.value))
        elif key in ("home", "ctrl+a"):
            self.pos = 0
        elif key in ("end", "ctrl+e"):
            self.pos = len(self.value)
        elif key == "ctrl+u":
            self.value = self.value[self.pos :]
            self.pos = 0
        elif key == "space":
            self._insert(" ")
        elif len(key) == 1 and key.isprintable():
            self._insert(key)
        else:
            return False
        return True

    def _insert(self, text: str) -> None:
        self.value = self.value[: self.pos] + text + self.value[self.pos :]
        self.pos += len(text)

    def display(self) -> str:
        """Value with a block cursor drawn at the insertion point."""
        return self.value[: self.pos] + "█" + self.value[self.pos :]


class BarMode(Enum):
    HIDDEN = "hidden"
    COMMAND = "command"
    FILTER = "filter"
    ACK_MESSAGE = "ack_message"


PROMPTS = {
    BarMode.COMMAND: (": ", "command"),
    BarMode.FILTER: ("/ ", "filter"),
    BarMode.ACK_MESSAGE: ("Message: ", "acknowledgment message"),
}


class CommandBar:
    def __init__(self) -> None:
        self.mode = BarMode.HIDDEN
        self.input = TextInput()
        self.width = 0

    def set_width(self, width: int) -> None:
        self.width = width

    def activate(self, mode: BarMode) -> None:
        self.mode = mode
        self.input = TextInput()

    def hide(self) -> None:
        self.mode = BarMode.HIDDEN
        self.input = TextInput()

    def is_active(self) -> bool:
        return self.mode is not BarMode.HIDDEN

    @property
    def value(self) -> str:
        return self.input.value.strip()

    def handle_key(self, key: str) -> bool:
        if not self.is_active():
            return False
        return self.input.handle_key(key)

    def text(self) -> str:
        if not self.is_active():
            return ""
        prompt, placeholder = PROMPTS[self.mode]
        if not self.input.value:
            return f"{prompt}█{placeholder}"
        return prompt + self.input.display()
