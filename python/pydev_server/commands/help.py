"""Commands listing."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydevkit.transport import JsonDict

from .base import Command
from ..context import ServerContext

if TYPE_CHECKING:  # pragma: no cover
    from . import CommandRegistry


class CommandsCommand(Command):
    def __init__(self) -> None:
        super().__init__("commands", "List the request types this server accepts", aliases=("help",))
        self._registry: CommandRegistry | None = None

    def bind(self, registry: "CommandRegistry") -> None:
        self._registry = registry

    def run(self, ctx: ServerContext, request: JsonDict) -> JsonDict:
        registry = self._registry or ctx.commands
        if registry is None:
            return {"success": True, "commands": [], "help": [], "sessions": ctx.sessions.ids()}
        commands = list(registry.list_commands())
        return {
            "success": True,
            "commands": sorted(command.name for command in commands),
            "help": [command.format_help() for command in commands],
            "sessions": ctx.sessions.ids(),
        }
