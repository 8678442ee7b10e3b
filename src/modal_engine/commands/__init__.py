"""Colon command registry and built-in commands."""

from .builtin import BuiltinCommands, Storage, register_builtin_commands
from .registry import (
    CommandHandler,
    CommandInvocation,
    CommandRef,
    CommandRegistry,
    parse_command_line,
)

__all__ = [
    "BuiltinCommands",
    "Storage",
    "register_builtin_commands",
    "CommandHandler",
    "CommandInvocation",
    "CommandRef",
    "CommandRegistry",
    "parse_command_line",
]
