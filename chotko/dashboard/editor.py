"""Overlay editor for a host's triggers and user macros."""

from __future__ import annotations

from enum import Enum

from ..zabbix.types import Host, HostMacro, Trigger, severity_name
from .command_bar import TextInput
from .messages import MacroDeleteMsg, MacroEditedMsg, TriggerToggleMsg

EditorResult = TriggerToggleMsg | MacroEditedMsg | MacroDeleteMsg | None


class EditorMode(Enum):
    NONE = "none"
    TRIGGERS = "triggers"
    MACROS = "macros"


TRIGGER_FOOTER = "[Space] toggle  [Esc] close"
MACRO_FOOTER = "[e]dit value  [d]elete  [Esc] close"
EDIT_FOOTER = "[Enter] save  [Esc] cancel"
CONFIRM_FOOTER = "[y]es  [n]o"


class Editor:
    """Modal list editor shown on top of the dashboard.

    Key handling returns a request message for the update function to turn
    into an API command; the editor itself never talks to the server.
    """

    def __init__(self) -> None:
        self.visible = False
        self.mode = EditorMode.NONE
        self.title = ""
        self.host: Host | None = None
        self.triggers: list[Trigger] = []
        self.macros: list[HostMacro] = []
        self.cursor = 0
        self.offset = 0
        self.width = 60
        self.height = 15
        self.confirm_action = ""
        self.confirm_target = ""
        self.edit_input: TextInput | None = None

    def set_screen_size(self, width: int, height: int) -> None:
        self.width = min(max(width * 80 // 100, 60), 120)
        self.height = min(max(height * 70 // 100, 15), 40)

    def list_rows(self) -> int:
        return max(self.height - 10, 3)

    def show_triggers(
        self, host: Host, triggers: list[Trigger], select_trigger_id: str = ""
    ) -> None:
        self._reset(EditorMode.TRIGGERS, f"Triggers: {host.display_name}", host)
        self.triggers = list(triggers)
        for i, trigger in enumerate(self.triggers):
            if select_trigger_id and trigger.triggerid == select_trigger_id:
                self.cursor = i
        self._ensure_visible()

    def show_macros(self, host: Host, macros: list[HostMacro]) -> None:
        self._reset(EditorMode.MACROS, f"Macros: {host.display_name}", host)
        self.macros = list(macros)

    def _reset(self, mode: EditorMode, title: str, host: Host) -> None:
        self.visible = True
        self.mode = mode
        self.title = title
        self.host = host
        self.cursor = 0
        self.offset = 0
        self.confirm_action = ""
        self.confirm_target = ""
        self.edit_input = None

    def hide(self) -> None:
        self.visible = False
        self.mode = EditorMode.NONE
        self.confirm_action = ""
        self.edit_input = None

    @property
    def host_id(self) -> str:
        return self.host.hostid if self.host else ""

    def is_confirming(self) -> bool:
        return bool(self.confirm_action)

    def is_editing(self) -> bool:
        return self.edit_input is not None

    def _count(self) -> int:
        if self.mode is EditorMode.TRIGGERS:
            return len(self.triggers)
        if self.mode is EditorMode.MACROS:
            return len(self.macros)
        return 0

    def selected_trigger(self) -> Trigger | None:
        if self.mode is EditorMode.TRIGGERS and 0 <= self.cursor < len(self.triggers):
            return self.triggers[self.cursor]
        return None

    def selected_macro(self) -> HostMacro | None:
        if self.mode is EditorMode.MACROS and 0 <= self.cursor < len(self.macros):
            return self.macros[self.cursor]
        return None

    def _ensure_visible(self) -> None:
        rows = self.list_rows()
        if self.cursor < self.offset:
            self.offset = self.cursor
        elif self.cursor >= self.offset + rows:
            self.offset = self.cursor - rows + 1

    def _move(self, delta: int) -> None:
        count = self._count()
        if count:
            self.cursor = min(max(self.cursor + delta, 0), count - 1)
            self._ensure_visible()

    # -- key handling ----------------------------------------------------

    def handle_key(self, key: str) -> EditorResult:
        if not self.visible:
            return None
        if self.edit_input is not None:
            return self._handle_edit(key)
        if self.confirm_action:
            return self._handle_confirm(key)
        if key == "esc":
            self.hide()
        elif key in ("up", "k"):
            self._move(-1)
        elif key in ("down", "j"):
            self._move(1)
        elif self.mode is EditorMode.TRIGGERS and key == "space":
            trigger = self.selected_trigger()
            if trigger is not None:
                self.confirm_action = "disable" if trigger.is_enabled() else "enable"
                self.confirm_target = trigger.description
        elif self.mode is EditorMode.MACROS and key in ("e", "enter"):
            macro = self.selected_macro()
            if macro is not None:
                # secret values cannot be read back, so start empty
                self.edit_input = TextInput("" if macro.is_secret() else macro.value)
        elif self.mode is EditorMode.MACROS and key == "d":
            macro = self.selected_macro()
            if macro is not None:
                self.confirm_action = "delete"
                self.confirm_target = macro.macro
        return None

    def _handle_confirm(self, key: str) -> EditorResult:
        if key in ("y", "Y", "enter"):
            action = self.confirm_action
            self.confirm_action = ""
            if action in ("enable", "disable"):
                trigger = self.selected_trigger()
                if trigger is not None:
                    return TriggerToggleMsg(
                        trigger_id=trigger.triggerid,
                        host_id=self.host_id,
                        enable=action == "enable",
                    )
            elif action == "delete":
                macro = self.selected_macro()
                if macro is not None:
                    return MacroDeleteMsg(macro.hostmacroid, macro.macro, self.host_id)
        elif key in ("n", "N", "esc"):
            self.confirm_action = ""
        return None

    def _handle_edit(self, key: str) -> EditorResult:
        assert self.edit_input is not None
        if key == "esc":
            self.edit_input = None
            return None
        if key == "enter":
            value = self.edit_input.value
            self.edit_input = None
            macro = self.selected_macro()
            if macro is None:
                return None
            return MacroEditedMsg(macro.hostmacroid, macro.macro, value, self.host_id)
        self.edit_input.handle_key(key)
        return None

    # -- rendering helpers -----------------------------------------------

    def confirm_text(self) -> str:
        return f"Are you sure you want to {self.confirm_action} '{self.confirm_target}'? (y/n)"

    def footer(self) -> str:
        if self.confirm_action:
            return CONFIRM_FOOTER
        if self.edit_input is not None:
            return EDIT_FOOTER
        if self.mode is EditorMode.TRIGGERS:
            return TRIGGER_FOOTER
        return MACRO_FOOTER

    def lines(self) -> list[str]:
        """Body rows (without title and footer) for the popup renderer."""
        rows: list[str] = []
        visible = range(self.offset, min(self.offset + self.list_rows(), self._count()))
        if self.mode is EditorMode.TRIGGERS:
            if not self.triggers:
                return ["No triggers found for this host"]
            for i in visible:
                rows.append(format_trigger_row(self.triggers[i], i == self.cursor))
        elif self.mode is EditorMode.MACROS:
            if not self.macros:
                return ["No macros found for this host"]
            for i in visible:
                macro = self.macros[i]
                if i == self.cursor and self.edit_input is not None:
                    rows.append(f"> {macro.macro} = {self.edit_input.display()}")
                else:
                    rows.append(format_macro_row(macro, i == self.cursor))
        if self.confirm_action:
            rows += ["", self.confirm_text()]
        return rows


def format_trigger_row(trigger: Trigger, selected: bool) -> str:
    marker = ">" if selected else " "
    state = "[ON] " if trigger.is_enabled() else "[OFF]"
    severity = severity_name(trigger.priority_int())
    row = f"{marker} {state} [{severity}] {trigger.description}"
    if trigger.is_problem():
        row += " PROBLEM"
    return row


def format_macro_row(macro: HostMacro, selected: bool) -> str:
    marker = ">" if selected else " "
    row = f"{marker} {macro.macro} = {macro.display_value()}"
    if macro.is_vault():
        row += " (vault)"
    if macro.description:
        row += f"  # {macro.description}"
    return row
