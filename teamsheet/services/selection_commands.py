"""
Command pattern implementation for selection edits.

Each command snapshots the store before and after its first run, so undo and
redo both restore a map in a single atomic replace.
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from ..models.selection import SelectionMap
from ..utils.constants import MAX_COMMAND_HISTORY
from .drop_resolver import DropEvent
from .selection_store import SelectionStore


class Command(ABC):
    """Abstract base class for undoable selection edits."""

    @abstractmethod
    def execute(self) -> bool:
        """
        Execute the command.

        Returns:
            True if the command changed the selection map
        """
        pass

    @abstractmethod
    def undo(self) -> bool:
        """
        Undo the command.

        Returns:
            True if the previous map was restored
        """
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Get human-readable description of the command."""
        pass


class SnapshotCommand(Command):
    """Runs an edit against a store and restores the prior snapshot on undo."""

    def __init__(self, store: SelectionStore, description: str):
        self.store = store
        self._description = description
        self._previous: Optional[SelectionMap] = None
        self._result: Optional[SelectionMap] = None

    def execute(self) -> bool:
        previous = self.store.snapshot()
        if self._result is not None:
            # Redo restores the exact map, bench slot ids included
            changed = self.store.replace_all(self._result)
        else:
            changed = self._apply()
            if changed:
                self._result = self.store.snapshot()
        if not changed:
            return False
        self._previous = previous
        return True

    def undo(self) -> bool:
        if self._previous is None:
            return False
        self.store.replace_all(self._previous)
        return True

    @property
    def description(self) -> str:
        return self._description

    @abstractmethod
    def _apply(self) -> bool:
        pass


class DropPlayerCommand(SnapshotCommand):
    """Place (or swap) a player via the drop resolver."""

    def __init__(self, store: SelectionStore, event: DropEvent):
        super().__init__(store, f"Drop onto {event.to_slot_id}")
        self.event = event

    def _apply(self) -> bool:
        return self.store.apply_drop(self.event)


class SubstituteDropCommand(SnapshotCommand):
    """Move a player to the bench."""

    def __init__(self, store: SelectionStore, player_id: Optional[str],
                 from_slot_id: Optional[str] = None):
        super().__init__(store, f"Move {player_id or from_slot_id} to substitutes")
        self.player_id = player_id
        self.from_slot_id = from_slot_id
        self.slot_id: Optional[str] = None

    def _apply(self) -> bool:
        self.slot_id = self.store.drop_to_substitutes(self.player_id, self.from_slot_id)
        return self.slot_id is not None


class RemovePlayerCommand(SnapshotCommand):
    """Clear a single slot."""

    def __init__(self, store: SelectionStore, slot_id: str):
        super().__init__(store, f"Clear {slot_id}")
        self.slot_id = slot_id

    def _apply(self) -> bool:
        return self.store.remove(self.slot_id)


class ReplaceSelectionsCommand(SnapshotCommand):
    """Bulk replace a store's map."""

    def __init__(self, store: SelectionStore, selections: dict):
        super().__init__(store, "Replace lineup")
        self.selections = selections

    def _apply(self) -> bool:
        return self.store.replace_all(self.selections)


class SelectionCommandManager:
    """
    Manager for executing and tracking selection commands with undo/redo support.
    """

    def __init__(self, max_history: int = MAX_COMMAND_HISTORY):
        """
        Initialize command manager.

        Args:
            max_history: Maximum number of commands to keep in history
        """
        self.max_history = max_history
        self._command_history: List[Command] = []
        self._current_index = -1

    def execute_command(self, command: Command) -> bool:
        """
        Execute a command and add it to history.

        Commands that change nothing are not recorded.

        Returns:
            True if command executed successfully
        """
        success = command.execute()

        if success:
            # Remove any commands after current index (for redo functionality)
            self._command_history = self._command_history[:self._current_index + 1]
            self._command_history.append(command)
            self._current_index += 1

            if len(self._command_history) > self.max_history:
                self._command_history.pop(0)
                self._current_index -= 1

        return success

    def undo(self) -> bool:
        """Undo the last command."""
        if not self.can_undo():
            return False

        command = self._command_history[self._current_index]
        success = command.undo()
        if success:
            self._current_index -= 1
        return success

    def redo(self) -> bool:
        """Redo the next command."""
        if not self.can_redo():
            return False

        command = self._command_history[self._current_index + 1]
        success = command.execute()
        if success:
            self._current_index += 1
        return success

    def can_undo(self) -> bool:
        return self._current_index >= 0

    def can_redo(self) -> bool:
        return self._current_index < len(self._command_history) - 1

    def get_command_history(self) -> List[str]:
        """Get history of command descriptions."""
        return [cmd.description for cmd in self._command_history]

    def forget_store(self, store: SelectionStore) -> None:
        """Drop history entries that target a store that no longer exists."""
        kept: List[Command] = []
        index = self._current_index
        for position, cmd in enumerate(self._command_history):
            if isinstance(cmd, SnapshotCommand) and cmd.store is store:
                if position <= self._current_index:
                    index -= 1
                continue
            kept.append(cmd)
        self._command_history = kept
        self._current_index = index

    def clear_history(self) -> None:
        """Clear command history."""
        self._command_history.clear()
        self._current_index = -1
