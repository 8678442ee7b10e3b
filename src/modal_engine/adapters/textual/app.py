"""Executable Textual app that hosts the modal engine."""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Sequence, Tuple

try:  # pragma: no cover - imported only when the demo is run
    from textual import events
    from textual.app import App, ComposeResult
    from textual.containers import Vertical
    from textual.widgets import Footer, Header, Static
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use modal_engine.adapters.textual.app"
    ) from exc

from modal_engine.buffer import BufferMirror
from modal_engine.config import ENV_PREFIX, EngineConfig
from modal_engine.runtime import telemetry
from modal_engine.session import EditorSession

from .controller import TextualUIHooks, TextualVimAdapter


class FileStorage:
    """``Storage`` backed by the local filesystem."""

    def __init__(self, path: Optional[Path] = None, *, encoding: str = "utf-8") -> None:
        self.path = path
        self.encoding = encoding

    def _target(self, path: Optional[str]) -> Path:
        if path:
            return Path(path).expanduser()
        if self.path is None:
            raise ValueError("No file name")
        return self.path

    def save(self, text: str, path: Optional[str]) -> str:
        target = self._target(path)
        target.write_text(text, encoding=self.encoding)
        if self.path is None:
            self.path = target
        return str(target)

    def load(self, path: Optional[str]) -> Tuple[str, str]:
        target = self._target(path)
        text = target.read_text(encoding=self.encoding) if target.exists() else ""
        self.path = target
        return text, str(target)


def create_session(path: Optional[Path] = None) -> EditorSession:
    """Build a session over ``path`` (which may not exist yet)."""

    storage = FileStorage(path)
    text = ""
    if path is not None and path.exists():
        text, _ = storage.load(str(path))
    return EditorSession(
        text,
        config=EngineConfig.from_env(),
        storage=storage,
        name=path.name if path else "[No Name]",
    )


@dataclass
class UIState:
    buffer_text: str = ""
    status_text: str = ""
    command_text: str = ""
    mode_label: str = ""


class ModalEngineApp(App[None]):
    """Minimal Textual UI embedding the modal engine."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#buffer-view {
		height: 1fr;
		border: round $accent;
		padding: 1 1;
		content-align: left top;
		overflow: auto;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}

	#command-line {
		height: 1;
		background: $surface-darken-2;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("ctrl+c", "quit", "Quit"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, *, path: Optional[Path] = None) -> None:
        super().__init__()
        self._state = UIState()
        self._path = path
        self.session: EditorSession | None = None
        self.adapter: TextualVimAdapter | None = None
        self._buffer_widget: Static | None = None
        self._status_widget: Static | None = None
        self._command_widget: Static | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Vertical(id="buffer-area"):
            self._buffer_widget = Static("", id="buffer-view", markup=False)
            yield self._buffer_widget
        self._status_widget = Static("", id="status-line", markup=False)
        self._command_widget = Static("", id="command-line", markup=False)
        yield self._status_widget
        yield self._command_widget
        yield Footer()

    async def on_mount(self) -> None:
        self.session = create_session(self._path)
        hooks = TextualUIHooks(
            update_buffer=self._update_buffer,
            update_status=self._update_status,
            show_command=self._show_command,
            show_mode=self._show_mode,
            handle_event=self._handle_event,
            request_exit=self.exit,
            log=self._log_line,
        )
        self.adapter = TextualVimAdapter(self.session, hooks)
        self.set_interval(0.1, self._process_timeouts)

    def _process_timeouts(self) -> None:
        if self.adapter:
            self.adapter.process_timeouts()

    async def on_key(self, event: events.Key) -> None:
        if not self.adapter:
            return
        normalized = self._normalize_key(event)
        if normalized is None:
            return
        key, text, modifiers = normalized
        self.adapter.handle_textual_key(key, text=text, modifiers=modifiers)
        event.stop()

    def _update_buffer(self, mirror: BufferMirror) -> None:
        row, col = mirror.cursor
        lines = mirror.text.split("\n")
        line = lines[row]
        lines[row] = line[:col] + "█" + line[col + 1 :]
        self._state.buffer_text = "\n".join(lines)
        if self._buffer_widget:
            self._buffer_widget.update(self._state.buffer_text)

    def _update_status(self, status: str) -> None:
        self._state.status_text = status
        if self._status_widget:
            self._status_widget.update(status)

    def _show_command(self, command: str) -> None:
        self._state.command_text = command
        if self._command_widget:
            mode = self.session.current_mode().value if self.session else ""
            self._command_widget.update(f":{command}" if mode == "command" else "")

    def _show_mode(self, label: str) -> None:
        self._state.mode_label = label
        self.sub_title = label

    def _handle_event(self, name: str, payload: Any | None) -> None:
        if name == "visual.yank" and isinstance(payload, str):
            self._update_status(f"{payload.count(chr(10)) + 1} line(s) yanked")

    def _log_line(self, line: str) -> None:
        telemetry.get_logger("modal_engine.adapters.textual").debug(line)

    @staticmethod
    def _normalize_key(
        event: events.Key,
    ) -> Optional[Tuple[str, Optional[str], Tuple[str, ...]]]:
        key = event.key
        if key in {"ctrl+c", "ctrl+q"}:
            return None
        if "+" not in key and event.character and event.character.isprintable():
            return (event.character, event.character, ())
        return (key, None, ())


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the modal engine Textual demo.")
    parser.add_argument("path", nargs="?", type=Path, help="File to edit")
    parser.add_argument(
        "--log-level",
        default=os.environ.get(f"{ENV_PREFIX}LOG_LEVEL"),
        help="Engine log level (default: WARNING)",
    )
    parser.add_argument(
        "--log-file",
        default=os.environ.get(f"{ENV_PREFIX}LOG_FILE"),
        help="Write engine logs to this file instead of the terminal",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    config = telemetry.TelemetryConfig(
        level=(args.log_level or "WARNING").upper(),
        console=False,
        log_file=args.log_file or "",
    )
    telemetry.configure(config=config)
    app = ModalEngineApp(path=args.path)
    app.run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()
