import logging

from table_commands import Command

logger = logging.getLogger(__name__)


class CommandManager:
    """Runs commands against a store and keeps the undo/redo stacks."""

    def __init__(self, store, max_depth: int | None = None):
        self.store = store
        self.max_depth = max_depth
        self._undo_stack: list[Command] = []
        self._redo_stack: list[Command] = []

    # ---------- stack helpers ----------
    def _push_undo(self, command: Command):
        self._undo_stack.append(command)
        if self.max_depth is not None and len(self._undo_stack) > self.max_depth:
            self._undo_stack.pop(0)

    @property
    def undo_depth(self) -> int:
        return len(self._undo_stack)

    @property
    def redo_depth(self) -> int:
        return len(self._redo_stack)

    def can_undo(self) -> bool:
        return bool(self._undo_stack)

    def can_redo(self) -> bool:
        return bool(self._redo_stack)

    def peek_undo(self) -> Command | None:
        return self._undo_stack[-1] if self._undo_stack else None

    def peek_redo(self) -> Command | None:
        return self._redo_stack[-1] if self._redo_stack else None

    def clear(self):
        self._undo_stack.clear()
        self._redo_stack.clear()

    # ---------- execute/undo/redo ----------
    def execute(self, command: Command) -> Command:
        # a command that raises is never recorded
        command.execute(self.store)
        self._push_undo(command)
        self._redo_stack.clear()
        logger.debug("Executed %r (%d undoable)", command, len(self._undo_stack))
        return command

    def undo(self) -> Command | None:
        if not self._undo_stack:
            logger.debug("Nothing to undo")
            return None
        command = self._undo_stack[-1]
        command.undo(self.store)
        self._undo_stack.pop()
        self._redo_stack.append(command)
        logger.debug("Undone %r (%d more)", command, len(self._undo_stack))
        return command

    def redo(self) -> Command | None:
        if not self._redo_stack:
            logger.debug("Nothing to redo")
            return None
        command = self._redo_stack[-1]
        command.execute(self.store)
        self._redo_stack.pop()
        self._push_undo(command)
        logger.debug("Redone %r (%d more)", command, len(self._redo_stack))
        return command
