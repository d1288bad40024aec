"""
Command Invoker - Execute, Record, Undo (LIFO)

Rules:
1. execute_command runs a PENDING command and records it, whether the
   command succeeded or failed. A failed payment stays in history so its
   undo can say "nothing to undo".
2. A command that isn't PENDING is rejected and NOT recorded.
   History never contains a pending command, or the same command twice.
3. undo_last_command pops the newest command and undoes it.
   Empty history is reported, not raised.

No redo, no undo at arbitrary positions.
"""

from __future__ import annotations

import structlog

from order_workflow.application.commands import Command, CommandState, UndoOutcome
from order_workflow.domain.errors import FailureKind, describe, require

logger = structlog.get_logger(__name__)


class CommandInvoker:
    """Owns one workflow session's command history."""

    def __init__(self) -> None:
        self._history: list[Command] = []

    @property
    def history(self) -> tuple[Command, ...]:
        """Recorded commands, oldest first."""
        return tuple(self._history)

    @property
    def can_undo(self) -> bool:
        return bool(self._history)

    def __len__(self) -> int:
        return len(self._history)

    def execute_command(self, command: Command) -> CommandState:
        command = require(command, "command")
        if command.state is not CommandState.PENDING:
            logger.warning(
                "invoker.command_rejected",
                **describe(
                    FailureKind.PROTOCOL_MISUSE,
                    command=command.name,
                    command_id=command.command_id,
                    state=command.state.value,
                ),
            )
            return command.state

        state = command.execute()
        self._history.append(command)
        logger.info(
            "invoker.command_executed",
            command=command.name,
            command_id=command.command_id,
            state=state.value,
            history_size=len(self._history),
        )
        return state

    def undo_last_command(self) -> UndoOutcome:
        if not self._history:
            logger.info("invoker.nothing_to_undo", reason="history is empty")
            return UndoOutcome.NOTHING_TO_UNDO

        command = self._history.pop()
        outcome = command.undo()
        logger.info(
            "invoker.command_undone",
            command=command.name,
            command_id=command.command_id,
            outcome=outcome.value,
            history_size=len(self._history),
        )
        return outcome
