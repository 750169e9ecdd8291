"""
Reconciliation ledger for the ignore and todo override tables.

Each family starts with live copies of its ignore and todo sets. Names are
crossed off as extraction and emission meet them; whatever is left at the end
points at a property the drafts no longer define, which means the override
configuration is stale.
"""

from .exceptions import ConfigDriftError
from .logger import get_module_logger
from .overrides import OverrideTables

logger = get_module_logger("ledger")

class ReconciliationLedger:
    """Tracks which ignore/todo entries of one family have been matched."""

    def __init__(self, family: str, ignore: set[str], todo: set[str]):
        self.family = family
        self.pending_ignore = set(ignore)
        self.pending_todo = set(todo)
        self._ignore = frozenset(ignore)
        self._todo = frozenset(todo)

    @classmethod
    def for_family(cls, family: str, overrides: OverrideTables) -> "ReconciliationLedger":
        return cls(
            family,
            ignore=set(overrides.names("ignore", family)),
            todo=set(overrides.names("todo", family))
        )

    def consume_ignored(self, name: str) -> bool:
        """Mark an ignore entry as matched. Returns True if the name is ignore-listed."""
        if name not in self._ignore:
            return False
        self.pending_ignore.discard(name)
        return True

    def consume_deferred(self, name: str) -> bool:
        """Mark a todo entry as matched. Returns True if the name is todo-listed."""
        if name not in self._todo:
            return False
        self.pending_todo.discard(name)
        return True

    def reconcile(self) -> None:
        """
        Fail if any ignore or todo entry was never matched.

        Raises:
            ConfigDriftError: naming the family and the stale property names
        """
        if self.pending_ignore:
            pending = sorted(self.pending_ignore)
            raise ConfigDriftError(
                f"Spec {self.family} wanted to ignore the following properties "
                f"but they are not present in this spec: {', '.join(pending)}",
                family=self.family,
                pending=pending,
                table="ignore"
            )
        if self.pending_todo:
            pending = sorted(self.pending_todo)
            raise ConfigDriftError(
                f"Spec {self.family} wanted to comment out the following properties "
                f"but they are not present in this spec: {', '.join(pending)}",
                family=self.family,
                pending=pending,
                table="todo"
            )
        logger.debug(f"Ledger for {self.family} reconciled")
