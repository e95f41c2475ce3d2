"""Command registry for the pydev server."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from .base import Command, RequestError
from .docs import ObjectInfoCommand, SearchDocCommand
from .evaluate import EvalCommand
from .help import CommandsCommand
from .repl import ReplCompleteCommand, ReplHandleCommand, ReplStartCommand, ReplStopCommand


class CommandRegistry:
    """Stores the known commands and resolves aliases."""

    def __init__(self) -> None:
        self._commands: Dict[str, Command] = {}
        self._ordered: List[Command] = []

    def register(self, command: Command) -> None:
        self._ordered.append(command)
        self._commands[command.name] = command
        for alias in command.aliases:
            self._commands[alias] = command

    def get(self, name: str) -> Optional[Command]:
        return self._commands.get(name)

    def list_commands(self) -> Iterable[Command]:
        return self._ordered


def build_registry() -> CommandRegistry:
    registry = CommandRegistry()
    commands = [
        EvalCommand(),
        SearchDocCommand(),
        ObjectInfoCommand(),
        ReplStartCommand(),
        ReplHandleCommand(),
        ReplStopCommand(),
        ReplCompleteCommand(),
        CommandsCommand(),
    ]
    for command in commands:
        registry.register(command)
        bind = getattr(command, "bind", None)
        if callable(bind):
            bind(registry)
    return registry


__all__ = ["Command", "CommandRegistry", "RequestError", "build_registry"]
