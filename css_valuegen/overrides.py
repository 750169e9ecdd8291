"""
Operator-maintained override tables.

These constrain or short-circuit the Grammar Classifier and are checked by the
Reconciliation Ledger. They are configuration, not derived data, so they live
in a YAML resource (overrides.yaml) and are passed explicitly to the stages
that consult them.

Tables (each keyed by family name):
  ignore           names dropped at extraction (moved to another spec, or rough drafts)
  todo             names emitted commented-out until a parser can handle them
  enum             names forced to the enum shape
  struct           names forced to the struct shape
  borrow           names that need the borrowed-data parameter
  manual_parse     names whose Parse impl is handwritten
  value_extensions name → grammar suffix defined by another spec
"""

from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field

from .exceptions import ConfigConflictError
from .logger import get_module_logger

logger = get_module_logger("overrides")

DEFAULT_OVERRIDES_PATH = Path(__file__).parent / "overrides.yaml"

TABLE_NAMES = ("ignore", "todo", "enum", "struct", "borrow", "manual_parse")


class OverrideTables(BaseModel):
    """All override tables, keyed by family then property name."""
    ignore: dict[str, set[str]] = Field(default_factory=dict)
    todo: dict[str, set[str]] = Field(default_factory=dict)
    enum: dict[str, set[str]] = Field(default_factory=dict)
    struct: dict[str, set[str]] = Field(default_factory=dict)
    borrow: dict[str, set[str]] = Field(default_factory=dict)
    manual_parse: dict[str, set[str]] = Field(default_factory=dict)
    value_extensions: dict[str, dict[str, str]] = Field(default_factory=dict)

    def names(self, table: str, family: str) -> frozenset[str]:
        """Names listed in `table` for `family` (empty when the family has no entry)."""
        if table not in TABLE_NAMES:
            raise KeyError(f"Unknown override table: {table}")
        return frozenset(getattr(self, table).get(family, ()))

    def has(self, table: str, family: str, name: str) -> bool:
        return name in self.names(table, family)

    def value_extension(self, family: str, name: str) -> str:
        return self.value_extensions.get(family, {}).get(name, "")

    def check_conflicts(self, family: Optional[str] = None) -> None:
        """
        Fail if a name is forced to both shapes.

        Runs over the table entries themselves, so a name no draft defines
        is caught too.

        Args:
            family: Only check this family (default: every family)

        Raises:
            ConfigConflictError: naming the first family and property found
        """
        families = [family] if family is not None else sorted(set(self.enum) | set(self.struct))
        for fam in families:
            shared = self.names("enum", fam) & self.names("struct", fam)
            if shared:
                name = sorted(shared)[0]
                raise ConfigConflictError(
                    f"{name} was in both the enum overrides and the struct overrides. "
                    f"It should not be in both.",
                    family=fam, property_name=name, details={"shared": sorted(shared)}
                )


def load_overrides(path: Optional[Union[str, Path]] = None) -> OverrideTables:
    """
    Load override tables from a YAML file.

    Args:
        path: YAML file; defaults to the overrides.yaml shipped with the package

    Returns:
        Validated OverrideTables

    Raises:
        ConfigConflictError: a name is in both the enum and struct tables
    """
    path = Path(path) if path else DEFAULT_OVERRIDES_PATH
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}

    # YAML reads an empty entry ("ui:") as null
    for table in (*TABLE_NAMES, "value_extensions"):
        empty = {} if table == "value_extensions" else []
        data[table] = {
            family: names or empty
            for family, names in (data.get(table) or {}).items()
        }

    tables = OverrideTables.model_validate(data)
    tables.check_conflicts()
    counts = {t: sum(len(v) for v in getattr(tables, t).values()) for t in TABLE_NAMES}
    logger.debug(f"Loaded overrides from {path}: {counts}")
    return tables
