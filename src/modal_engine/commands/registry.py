"""Registry of colon commands executed from command-line mode."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, Iterator, Optional, Tuple

from modal_engine.errors import CommandExecutionError, EngineError, UnknownCommandError
from modal_engine.runtime.telemetry import get_logger, span

if TYPE_CHECKING:  # pragma: no cover
    from modal_engine.modes.handle import EditorHandle


@dataclass(frozen=True, slots=True)
class CommandInvocation:
    """A parsed command line: ``:w! notes.txt`` -> ``w``, bang, ``("notes.txt",)``."""

    name: str
    args: Tuple[str, ...] = ()
    bang: bool = False
    raw: str = ""

    @property
    def argument(self) -> str:
        return " ".join(self.args)


CommandHandler = Callable[["EditorHandle", CommandInvocation], Optional[str]]


@dataclass(frozen=True, slots=True)
class CommandRef:
    """Named command plus the aliases it answers to."""

    name: str
    handler: CommandHandler
    aliases: Tuple[str, ...] = ()
    description: str = ""

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("command name cannot be empty")
        if not callable(self.handler):
            raise TypeError("handler must be callable")

    @property
    def names(self) -> Tuple[str, ...]:
        return (self.name, *self.aliases)


def parse_command_line(line: str) -> Optional[CommandInvocation]:
    """Split a command line into name and arguments; blank lines give ``None``."""

    text = line.strip().lstrip(":").strip()
    if not text:
        return None
    name, *rest = text.split(None, 1)
    bang = name.endswith("!") and len(name) > 1
    if bang:
        name = name[:-1]
    args = tuple(rest[0].split()) if rest else ()
    return CommandInvocation(name=name, args=args, bang=bang, raw=text)


class CommandRegistry:
    """Maps command names and aliases to ``CommandRef`` objects.

    Re-registering a name replaces the previous command, mirroring how key
    bindings overwrite each other.
    """

    def __init__(self, *, logger_name: str = "modal_engine.commands") -> None:
        self._commands: Dict[str, CommandRef] = {}
        self._names: Dict[str, str] = {}
        self.logger_name = logger_name
        self.logger = get_logger(logger_name)

    def register(
        self,
        name: str,
        handler: CommandHandler,
        *,
        aliases: Tuple[str, ...] = (),
        description: str = "",
    ) -> CommandRef:
        ref = CommandRef(
            name=name, handler=handler, aliases=tuple(aliases), description=description
        )
        self.unregister(name)
        self._commands[ref.name] = ref
        for alias in ref.names:
            previous = self._names.get(alias)
            if previous is not None and previous != ref.name:
                self.logger.debug(
                    "command %s replaces alias %s of %s", name, alias, previous
                )
            self._names[alias] = ref.name
        return ref

    def unregister(self, name: str) -> Optional[CommandRef]:
        ref = self._commands.pop(name, None)
        if ref is None:
            return None
        for alias in ref.names:
            if self._names.get(alias) == name:
                self._names.pop(alias)
        return ref

    def get(self, name: str) -> Optional[CommandRef]:
        canonical = self._names.get(name)
        if canonical is None:
            return None
        return self._commands.get(canonical)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name in self._names

    def __iter__(self) -> Iterator[CommandRef]:
        return iter(self._commands.values())

    def names(self) -> Tuple[str, ...]:
        return tuple(sorted(self._names))

    def execute(self, line: str, editor: "EditorHandle") -> Optional[str]:
        """Run ``line`` against ``editor`` and return the handler's message.

        Raises ``UnknownCommandError`` for unregistered names and wraps any
        handler failure in ``CommandExecutionError``.
        """

        invocation = parse_command_line(line)
        if invocation is None:
            return None
        with span(
            "commands::execute",
            logger_name=self.logger_name,
            component="commands",
            metadata={"command": invocation.name, "bang": invocation.bang},
            expected=(EngineError,),
        ) as handle:
            ref = self.get(invocation.name)
            if ref is None:
                handle.add_metadata("status", "unknown")
                raise UnknownCommandError(invocation.name)
            try:
                return ref.handler(editor, invocation)
            except CommandExecutionError:
                raise
            except Exception as exc:
                reason = str(exc) or type(exc).__name__
                raise CommandExecutionError(ref.name, reason) from exc


__all__ = [
    "CommandInvocation",
    "CommandHandler",
    "CommandRef",
    "CommandRegistry",
    "parse_command_line",
]
