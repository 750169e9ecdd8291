"""
Table Extractor: property definitions from rendered CSS drafts.

Reads the "propdef" tables of a bikeshed-rendered draft and turns each row set
into PropertyRecords. A draft is only trusted when its property index has the
expected shape: a #property-index heading followed by exactly one index table.

Pipeline position: Stage 1 of 3 (Extractor → Classifier → Emitter).
Input:  draft HTML for each revision of a family
Output: FamilyExtraction with merged PropertyRecords (last revision wins)
"""

import re
from typing import Callable, Iterable

from bs4 import BeautifulSoup

from .exceptions import DocumentShapeError
from .index_builder import draft_url, spec_name
from .ledger import ReconciliationLedger
from .logger import get_module_logger
from .schemas import (
    FamilyExtraction,
    NOT_ANIMATABLE,
    PropertyRecord,
    RevisionExtraction,
)

logger = get_module_logger("extractor")

PROPERTY_INDEX_SELECTOR = "#property-index"
INDEX_TABLE_SELECTOR = "#property-index + .big-element-wrapper table.index"
PROPDEF_SELECTOR = "table.propdef"

# Row labels we transcribe, after snake-casing ("Applies to:" → applies_to)
RECORD_FIELDS = (
    "name",
    "value",
    "initial",
    "applies_to",
    "inherited",
    "percentages",
    "canonical_order",
    "animation_type",
)
# Present only on tables that add keywords to a property defined elsewhere
EXTENSION_FIELD = "new_values"

NAME_SEPARATOR = re.compile(r"\s*,\s*")
SNAKE_PATTERN = re.compile(r"[_\-\s](\w)")


def field_key(label: str) -> str:
    """Row header text → snake_case field key ("Canonical order:" → canonical_order)."""
    label = label.strip().rstrip(":").strip()
    return SNAKE_PATTERN.sub(lambda m: f"_{m.group(1)}", label).lower()


class TableExtractor:
    """Extracts PropertyRecords from CSS draft documents."""

    def __init__(self, parser: str = "html5lib"):
        """
        Args:
            parser: BeautifulSoup tree builder ("html5lib" or "lxml")
        """
        self.parser = parser

    def extract(self, family: str, revision: int, html: str) -> RevisionExtraction:
        """
        Extract property records from one revision's document.

        Args:
            family: Spec family name, e.g. "align"
            revision: Revision number, e.g. 3
            html: Rendered draft HTML

        Returns:
            RevisionExtraction (records in document order, names expanded)

        Raises:
            DocumentShapeError: the property index is present but is not
                followed by exactly one index table
        """
        spec = spec_name(family, revision)
        url = draft_url(family, revision)
        soup = BeautifulSoup(html, self.parser)

        # --- Step 1: Validate the property index ---
        if not soup.select(PROPERTY_INDEX_SELECTOR):
            logger.info(f"{spec} has no property index")
            return RevisionExtraction(
                family=family, revision=revision, spec=spec, url=url,
                has_property_index=False
            )

        index_tables = soup.select(INDEX_TABLE_SELECTOR)
        if len(index_tables) != 1:
            raise DocumentShapeError(
                f"Saw {len(index_tables)} index tables in {spec}. Refusing to go further",
                family=family,
                revision=revision,
                details={"index_tables": len(index_tables)}
            )

        heading = soup.find("h1")
        title = heading.get_text(" ", strip=True) if heading else ""

        # --- Step 2: Read every propdef table ---
        records = []
        for table in soup.select(PROPDEF_SELECTOR):
            fields = self._read_table(table)
            if EXTENSION_FIELD in fields:
                # Grammar extensions are applied by name from the overrides;
                # merging grammars automatically is unsound
                logger.debug(f"{spec}: skipping value extension for {fields.get('name')}")
                continue
            if not fields.get("name"):
                logger.warning(f"{spec}: propdef table without a Name row")
                continue
            records.extend(self._expand_names(fields, spec, url))

        logger.info(f"{spec}: extracted {len(records)} property definitions")
        return RevisionExtraction(
            family=family, revision=revision, spec=spec, url=url,
            title=title, records=records
        )

    def extract_family(
        self,
        family: str,
        revisions: Iterable[int],
        fetch_document: Callable[[str, int], str],
        ledger: ReconciliationLedger
    ) -> FamilyExtraction:
        """
        Extract and merge all revisions of a family.

        Revisions are processed in ascending order and a later definition of
        a property replaces an earlier one. Ignore-listed names are dropped
        and crossed off in the ledger.

        Args:
            family: Spec family name
            revisions: Revision numbers for the family
            fetch_document: Returns the HTML for (family, revision)
            ledger: The family's reconciliation ledger

        Returns:
            FamilyExtraction with one record per surviving property name
        """
        merged: dict[str, PropertyRecord] = {}
        result = FamilyExtraction(family=family)

        for revision in sorted(revisions):
            extraction = self.extract(family, revision, fetch_document(family, revision))
            result.spec, result.url = extraction.spec, extraction.url
            if not extraction.has_property_index:
                continue
            result.title = extraction.title

            for record in extraction.records:
                if ledger.consume_ignored(record.name):
                    logger.debug(f"{family}: ignoring {record.name} from {extraction.spec}")
                    continue
                if record.name in merged:
                    logger.debug(f"{family}: {extraction.spec} redefines {record.name}")
                merged[record.name] = record

        result.records = list(merged.values())
        return result

    def _read_table(self, table) -> dict[str, str]:
        """Map each row's header label to its cell text."""
        fields = {}
        for row in table.find_all("tr"):
            header = row.find("th")
            cell = row.find("td")
            if header is None or cell is None:
                continue
            fields[field_key(header.get_text())] = cell.get_text().strip()
        return fields

    def _expand_names(self, fields: dict[str, str], spec: str, url: str) -> list[PropertyRecord]:
        """One record per comma-separated name, all other fields duplicated."""
        values = {key: fields[key] for key in RECORD_FIELDS if key in fields and key != "name"}
        values.setdefault("value", "")
        if not values.get("animation_type"):
            values["animation_type"] = NOT_ANIMATABLE

        names = [n for n in NAME_SEPARATOR.split(fields["name"].strip()) if n]
        return [PropertyRecord(name=name, spec=spec, url=url, **values) for name in names]


def extract(family: str, revision: int, html: str) -> RevisionExtraction:
    """Convenience function to extract one revision's property records."""
    return TableExtractor().extract(family, revision, html)
