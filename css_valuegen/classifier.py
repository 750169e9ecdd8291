"""
Grammar Classifier: decides the shape of each property's declaration.

Shape:
  enum:   the grammar's top level is a set of mutually exclusive alternatives
  struct: anything else (sequences, "||" / "&&" combinations, single types)

Borrow requirement:
  True when the grammar holds unbounded or self-referential data (lists,
  images, content lists, transform lists), so the declaration needs a
  lifetime parameter.

Inference can be overridden per property via the enum/struct/borrow tables,
but only where inference gets it wrong. An override that agrees with
inference, or one that contradicts another table, is a hard error.
"""

import re

from .exceptions import ConfigConflictError
from .logger import get_module_logger
from .overrides import OverrideTables
from .schemas import Classification, Shape

logger = get_module_logger("classifier")

TYPE_REFERENCE = re.compile(r"<[^>]+>")
FLAT_GROUP = re.compile(r"\[[^\[\]]*\]")
# A single "|" that is not part of "||"
SINGLE_BAR = re.compile(r"(?<!\|)\|(?!\|)")

# "<length> | <percentage>" and friends read as one tagged value, not an enum
COMBINED_RANGE = re.compile(
    r"^<(?:length|time|number|percentage)[^|>]*> \| <(?:length|time|number|percentage)[^|>]*>$"
)

# "auto | <length>", "<length> | none", "auto | none | <length>" ...
TYPE_OR_KEYWORD = re.compile(
    r"^(?:auto|none) \| <[^|<>]+>$"
    r"|^<[^|<>]+> \| (?:auto|none)$"
    r"|^(?:auto|none) \| (?:auto|none) \| <[^|<>]+>$"
    r"|^<[^|<>]+> \| (?:auto|none) \| (?:auto|none)$"
)

BORROW_MARKERS = (
    "<content-list>",
    "<counter-style>",
    "<dynamic-range-limit-mix()>",
    "<image-1D>",
    "<image>",
    "<line-width-list>",
    "<param()>",
    "<'column-rule-width'>",
    "<transform-list>",
    "]+",
    "]#",
)
# A "#" list multiplier, unless it is a bounded "#{n}" one
LIST_MULTIPLIER = re.compile(r"#(?:$|[^{])")


def top_level_alternatives(grammar: str) -> str:
    """Strip type references and flat bracket groups, leaving the top level."""
    return FLAT_GROUP.sub("", TYPE_REFERENCE.sub("", grammar)).strip()


def is_combined_range(grammar: str) -> bool:
    return bool(COMBINED_RANGE.match(grammar))


def is_type_or_keyword(grammar: str) -> bool:
    return bool(TYPE_OR_KEYWORD.match(grammar))


def infer_shape(grammar: str) -> Shape:
    """Shape inferred from the grammar alone, without overrides."""
    if is_combined_range(grammar) or is_type_or_keyword(grammar):
        return Shape.STRUCT
    if SINGLE_BAR.search(top_level_alternatives(grammar)):
        return Shape.ENUM
    return Shape.STRUCT


def infer_borrow(grammar: str) -> bool:
    """Whether the grammar alone implies borrowed data."""
    return any(marker in grammar for marker in BORROW_MARKERS) or bool(
        LIST_MULTIPLIER.search(grammar)
    )


class GrammarClassifier:
    """Classifies grammars, consulting the override tables of each family."""

    def __init__(self, overrides: OverrideTables):
        self.overrides = overrides

    def classify(self, family: str, name: str, grammar: str) -> Classification:
        """
        Classify one property's grammar.

        Args:
            family: Spec family the property belongs to
            name: Property name
            grammar: Raw value grammar (before any value extension)

        Returns:
            Classification with shape and borrow requirement

        Raises:
            ConfigConflictError: when an override is contradictory or redundant
        """
        forced_enum = self.overrides.has("enum", family, name)
        forced_struct = self.overrides.has("struct", family, name)
        inferred = infer_shape(grammar)

        if forced_enum and forced_struct:
            raise ConfigConflictError(
                f"{name} was in both the enum overrides and the struct overrides. "
                f"It should not be in both.",
                family=family, property_name=name
            )
        if forced_enum and inferred is Shape.ENUM:
            raise ConfigConflictError(
                f"{name} was inferred to be an enum from the grammar, but it is also in "
                f"the enum overrides. It should be removed from that table.",
                family=family, property_name=name, details={"grammar": grammar}
            )
        if forced_struct and inferred is Shape.STRUCT:
            raise ConfigConflictError(
                f"{name} was inferred to be a struct from the grammar, but it is also in "
                f"the struct overrides. It should be removed from that table.",
                family=family, property_name=name, details={"grammar": grammar}
            )

        if forced_enum:
            shape = Shape.ENUM
        elif forced_struct:
            shape = Shape.STRUCT
        else:
            shape = inferred

        listed_borrow = self.overrides.has("borrow", family, name)
        inferred_borrow = infer_borrow(grammar)
        if listed_borrow and inferred_borrow:
            raise ConfigConflictError(
                f"{name} was inferred to require borrowed data, but it is also in the "
                f"borrow overrides. It should be removed from that table.",
                family=family, property_name=name, details={"grammar": grammar}
            )

        classification = Classification(shape=shape, needs_borrow=listed_borrow or inferred_borrow)
        logger.debug(f"{family}/{name}: {grammar!r} → {shape.value}"
                     f"{' (borrowed)' if classification.needs_borrow else ''}")
        return classification
