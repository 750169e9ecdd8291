"""
Declaration Emitter: renders classified properties as style value declarations.

Each property becomes one declaration block: doc comment (with the grammar and
an optional web-features description), a syntax attribute quoting the
grammar, the derive list, the style_value metadata and the item itself. All
blocks of a family are concatenated into one module.

Pipeline position: Stage 3 of 3 (Extractor → Classifier → Emitter).
Input:  FamilyExtraction + Classification per property + descriptions
Output: module text, or None when the family defines no properties
"""

import re
from typing import Mapping, Optional, Sequence

from .ledger import ReconciliationLedger
from .logger import get_module_logger
from .overrides import OverrideTables
from .schemas import Classification, FamilyExtraction, PropertyRecord

logger = get_module_logger("emitter")

# Quoted grammars longer than this go on their own line
MAX_INLINE_SYNTAX = 110

DERIVES = (
    "Parse",
    "Peek",
    "ToSpan",
    "ToCursors",
    "StyleValue",
    "Visitable",
    "Debug",
    "Clone",
    "PartialEq",
    "Eq",
    "PartialOrd",
    "Ord",
    "Hash",
)

CUSTOM_PROPERTY = "--*"
CUSTOM_PROPERTY_ANCHOR = "defining-variables"
FEATURE_ID_TEMPLATE = "css.properties.{name}"

# Prefix for every line of a declaration that is not ready to compile yet
COMMENTED_OUT = "// "

MODULE_TEMPLATE = """#![allow(warnings)]
//! {title}
//! {url}

mod impls;
use impls::*;
{declarations}
"""

_WORD_BOUNDARY = re.compile(r"[_\-\s](\w)")


# --- Naming helpers ---

def camel(name: str) -> str:
    """align-content → alignContent"""
    return _WORD_BOUNDARY.sub(lambda m: m.group(1).upper(), name)


def pascal(name: str) -> str:
    """align-content → AlignContent"""
    name = camel(name)
    return name[:1].upper() + name[1:]


def snake(name: str) -> str:
    """anchor-position → anchor_position"""
    return _WORD_BOUNDARY.sub(lambda m: f"_{m.group(1)}", name).lower()


def escape_string(value: str) -> str:
    """Escape text for a double-quoted string literal in the generated source."""
    if not isinstance(value, str):
        return ""
    return (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )


def collapse(value: str) -> str:
    """Newlines → spaces, lower-cased; used for the style_value metadata."""
    return value.replace("\n", " ").lower()


class DeclarationEmitter:
    """Renders PropertyRecords into declaration blocks and modules."""

    def __init__(self, overrides: OverrideTables):
        self.overrides = overrides

    def grammar_text(self, family: str, record: PropertyRecord) -> str:
        """Grammar as written in the declaration, including any value extension."""
        return record.value.replace("\n", " ") + self.overrides.value_extension(family, record.name)

    def render_declaration(
        self,
        family: str,
        record: PropertyRecord,
        classification: Classification,
        description: str = "",
        deferred: bool = False
    ) -> str:
        """
        Render one declaration block.

        Args:
            family: Spec family the record belongs to
            record: Property definition
            classification: Shape and borrow decision for the record
            description: Human-readable description (may be empty)
            deferred: Comment out every line of the block

        Returns:
            The block text, starting with a blank line
        """
        grammar = self.grammar_text(family, record)
        is_custom = record.name == CUSTOM_PROPERTY
        anchor = CUSTOM_PROPERTY_ANCHOR if is_custom else record.name
        link = f"{record.url}#{anchor}"
        feature_id = FEATURE_ID_TEMPLATE.format(name=record.name)

        derives = list(DERIVES)
        if self.overrides.has("manual_parse", family, record.name):
            # Parse is handwritten for this one
            derives.remove("Parse")

        ident = "Custom" if is_custom else pascal(record.name)
        generics = "<'a>" if classification.needs_borrow else ""
        trail = " {}" if classification.is_enum else ";"

        lines = [f"/// Represents the style value for `{record.name}` as defined in [{record.spec}]({link})."]
        lines.append("///")
        if description:
            lines.append(f"/// {' '.join(description.split())}")
            lines.append("///")
        lines += [
            "/// The grammar is defined as:",
            "///",
            "/// ```text,ignore",
            f"/// {grammar}",
            "/// ```",
            "///",
            f"// {link}",
        ]

        syntax = f'" {escape_string(grammar)} "'
        if len(syntax) > MAX_INLINE_SYNTAX:
            lines += ["#[syntax(", f"\t{syntax}", ")]"]
        else:
            lines.append(f"#[syntax({syntax})]")

        lines += [
            f"#[derive({', '.join(derives)})]",
            "#[style_value(",
            f'\tinitial = "{escape_string(collapse(record.initial))}",',
            f'\tapplies_to = "{escape_string(collapse(record.applies_to))}",',
            f'\tinherited = "{escape_string(collapse(record.inherited))}",',
            f'\tpercentages = "{escape_string(collapse(record.percentages))}",',
            f'\tcanonical_order = "{escape_string(collapse(record.canonical_order))}",',
            f'\tanimation_type = "{escape_string(collapse(record.animation_type))}",',
            ")]",
            '#[cfg_attr(feature = "serde", derive(serde::Serialize), serde())]',
            f'#[cfg_attr(feature = "css_feature_data", derive(ToCSSFeature), css_feature("{feature_id}"))]',
            "#[visit]",
            f"pub {classification.shape.value} {ident}StyleValue{generics}{trail}",
        ]

        prefix = COMMENTED_OUT if deferred else ""
        return "\n" + "\n".join(f"{prefix}{line}" for line in lines)

    def emit(
        self,
        extraction: FamilyExtraction,
        classifications: Mapping[str, Classification],
        descriptions: Mapping[str, str],
        ledger: ReconciliationLedger
    ) -> Optional[str]:
        """
        Render a family's module.

        Todo-listed properties are rendered commented out and crossed off in
        the ledger.

        Returns:
            Module text, or None when the family has no records
        """
        if not extraction.records:
            logger.info(f"{extraction.family}: no properties to emit")
            return None

        blocks = []
        for record in extraction.records:
            deferred = ledger.consume_deferred(record.name)
            description = descriptions.get(FEATURE_ID_TEMPLATE.format(name=record.name), "")
            blocks.append(self.render_declaration(
                extraction.family,
                record,
                classifications[record.name],
                description=description,
                deferred=deferred
            ))
            if deferred:
                logger.debug(f"{extraction.family}: {record.name} emitted commented out")

        logger.info(f"{extraction.family}: rendered {len(blocks)} declarations")
        return render_module(extraction.title, extraction.url, blocks)


def render_module(title: str, url: str, blocks: Sequence[str]) -> Optional[str]:
    """Concatenate declaration blocks under the module header; None for no blocks."""
    if not blocks:
        return None
    return MODULE_TEMPLATE.format(title=title, url=url, declarations="\n".join(blocks))
