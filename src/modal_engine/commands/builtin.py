"""Built-in colon commands: write, quit, edit, echo, undo and redo."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol

from modal_engine.errors import CommandExecutionError

from .registry import CommandInvocation, CommandRegistry

if TYPE_CHECKING:  # pragma: no cover
    from modal_engine.modes.handle import EditorHandle

NO_WRITE_SINCE_CHANGE = "No write since last change (add ! to override)"


class Storage(Protocol):
    """Host capability that persists and loads buffer text.

    ``save`` and ``load`` receive the path typed after the command, or
    ``None`` for the current file. ``save`` returns the path written;
    ``load`` returns the text and the path it came from.
    """

    def save(self, text: str, path: Optional[str]) -> str:
        ...

    def load(self, path: Optional[str]) -> tuple[str, str]:
        ...


def _written_message(path: str, text: str) -> str:
    line_count = text.count("\n") + 1
    return f'"{path}" {line_count}L, {len(text)}B written'


class BuiltinCommands:
    """Command handlers bound to an optional host ``Storage``."""

    def __init__(self, storage: Optional[Storage] = None) -> None:
        self.storage = storage

    def _require_storage(self, name: str) -> Storage:
        if self.storage is None:
            raise CommandExecutionError(name, "no storage configured")
        return self.storage

    def _save(self, editor: "EditorHandle", invocation: CommandInvocation) -> str:
        storage = self._require_storage(invocation.name)
        text = editor.text()
        path = storage.save(text, invocation.argument or None)
        editor.mark_saved()
        return _written_message(path, text)

    def write(self, editor: "EditorHandle", invocation: CommandInvocation) -> str:
        return self._save(editor, invocation)

    def quit(self, editor: "EditorHandle", invocation: CommandInvocation) -> None:
        if editor.modified() and not invocation.bang:
            raise CommandExecutionError(invocation.name, NO_WRITE_SINCE_CHANGE)
        editor.emit("session.quit", {"force": invocation.bang})

    def write_quit(self, editor: "EditorHandle", invocation: CommandInvocation) -> str:
        message = self._save(editor, invocation)
        editor.emit("session.quit", {"force": invocation.bang})
        return message

    def exit(
        self, editor: "EditorHandle", invocation: CommandInvocation
    ) -> Optional[str]:
        message = self._save(editor, invocation) if editor.modified() else None
        editor.emit("session.quit", {"force": invocation.bang})
        return message

    def edit(self, editor: "EditorHandle", invocation: CommandInvocation) -> str:
        storage = self._require_storage(invocation.name)
        if editor.modified() and not invocation.bang:
            raise CommandExecutionError(invocation.name, NO_WRITE_SINCE_CHANGE)
        text, path = storage.load(invocation.argument or None)
        editor.set_text(text)
        editor.move_cursor(0, 0)
        editor.mark_saved()
        return f'"{path}" {editor.line_count()}L, {len(text)}B'

    def echo(self, editor: "EditorHandle", invocation: CommandInvocation) -> str:
        del editor
        return invocation.argument

    def undo(
        self, editor: "EditorHandle", invocation: CommandInvocation
    ) -> Optional[str]:
        del invocation
        if not editor.undo():
            return "Already at oldest change"
        return None

    def redo(
        self, editor: "EditorHandle", invocation: CommandInvocation
    ) -> Optional[str]:
        del invocation
        if not editor.redo():
            return "Already at newest change"
        return None


def register_builtin_commands(
    registry: CommandRegistry, *, storage: Optional[Storage] = None
) -> BuiltinCommands:
    commands = BuiltinCommands(storage)
    registry.register("write", commands.write, aliases=("w",), description="Write buffer")
    registry.register("quit", commands.quit, aliases=("q",), description="Quit")
    registry.register("wq", commands.write_quit, description="Write and quit")
    registry.register(
        "xit", commands.exit, aliases=("x", "exit"), description="Write if changed, quit"
    )
    registry.register("edit", commands.edit, aliases=("e",), description="Load a file")
    registry.register("echo", commands.echo, description="Show a message")
    registry.register("undo", commands.undo, aliases=("u",), description="Undo")
    registry.register("redo", commands.redo, aliases=("red",), description="Redo")
    return commands


__all__ = [
    "Storage",
    "BuiltinCommands",
    "register_builtin_commands",
    "NO_WRITE_SINCE_CHANGE",
]
