"""
Tests for the Index Builder, Table Extractor and Reconciliation Ledger.
"""

import pytest

from conftest import make_draft, propdef
from css_valuegen.exceptions import ConfigDriftError, DocumentShapeError
from css_valuegen.extractor import TableExtractor, extract, field_key
from css_valuegen.index_builder import build_index
from css_valuegen.ledger import ReconciliationLedger
from css_valuegen.overrides import OverrideTables
from css_valuegen.schemas import NOT_ANIMATABLE


# --- Index Builder ---

def test_build_index_groups_families():
    entries = [
        {"path": "css-align-3", "type": "tree"},
        {"path": "css-anchor-position-1", "type": "tree"},
        {"path": "css-align-4", "type": "tree"},
        {"path": "css-align-3.bs", "type": "blob"},
        {"path": "mediaqueries-5", "type": "tree"},
    ]
    assert build_index(entries) == {"align": [3, 4], "anchor-position": [1]}


def test_build_index_sorts_out_of_order_listing():
    entries = [
        {"path": "css-sizing-4", "type": "tree"},
        {"path": "css-sizing-3", "type": "tree"},
        {"path": "css-sizing-4", "type": "tree"},
    ]
    assert build_index(entries) == {"sizing": [3, 4]}


def test_build_index_skips_non_numeric_revisions():
    entries = [
        {"path": "css-module", "type": "tree"},
        {"path": "css-values-tests", "type": "tree"},
        {"path": "css-values-4", "type": "tree"},
    ]
    assert build_index(entries) == {"values": [4]}


# --- Table Extractor ---

@pytest.mark.parametrize("label, key", [
    ("Name:", "name"),
    ("Applies to:", "applies_to"),
    ("Canonical order:", "canonical_order"),
    (" Animation type: ", "animation_type"),
    ("New values:", "new_values"),
])
def test_field_key(label, key):
    assert field_key(label) == key


def test_extract_reads_all_fields():
    html = make_draft(
        propdef("align-content", "normal | <baseline-position>",
                initial="normal", inherited="No", animation_type="discrete"),
        title="CSS Box Alignment Module Level 3",
    )
    result = TableExtractor().extract("align", 3, html)

    assert result.title == "CSS Box Alignment Module Level 3"
    assert result.spec == "css-align-3"
    assert result.url == "https://drafts.csswg.org/css-align-3/"
    [record] = result.records
    assert record.name == "align-content"
    assert record.value == "normal | <baseline-position>"
    assert record.initial == "normal"
    assert record.applies_to == "all elements"
    assert record.inherited == "No"
    assert record.percentages == "N/A"
    assert record.canonical_order == "per grammar"
    assert record.animation_type == "discrete"
    assert record.spec == "css-align-3"


def test_missing_animation_type_defaults_to_not_animatable():
    result = TableExtractor().extract("ui", 4, make_draft(propdef("caret-color", "auto | <color>")))
    assert result.records[0].animation_type == NOT_ANIMATABLE


def test_comma_joined_names_expand():
    html = make_draft(propdef("baz, qux", "left | right"))
    records = TableExtractor().extract("bar", 1, html).records

    assert [r.name for r in records] == ["baz", "qux"]
    first, second = (r.model_dump(exclude={"name"}) for r in records)
    assert first == second


def test_extension_tables_are_dropped():
    html = make_draft(
        propdef("width", new_values="stretch | fit-content | contain"),
        propdef("aspect-ratio", "auto || <ratio>"),
    )
    records = TableExtractor().extract("sizing", 4, html).records
    assert [r.name for r in records] == ["aspect-ratio"]


def test_document_without_property_index_has_no_records():
    html = make_draft(propdef("foo", "a | b"), with_index=False)
    result = TableExtractor().extract("syntax", 3, html)
    assert not result.has_property_index
    assert result.records == []


@pytest.mark.parametrize("index_tables", [0, 2])
def test_index_table_count_must_be_one(index_tables):
    html = make_draft(propdef("foo", "a | b"), index_tables=index_tables)
    with pytest.raises(DocumentShapeError) as exc_info:
        TableExtractor().extract("broken", 1, html)
    assert exc_info.value.family == "broken"
    assert exc_info.value.revision == 1
    assert f"Saw {index_tables} index tables" in exc_info.value.message


def test_lxml_tree_builder_reads_the_same_records():
    html = make_draft(propdef("baz, qux", "left | right"))
    records = TableExtractor(parser="lxml").extract("bar", 1, html).records
    assert [r.name for r in records] == ["baz", "qux"]


def test_later_revision_wins():
    docs = {
        1: make_draft(propdef("foo", "auto | <length>"), propdef("bar", "a | b")),
        2: make_draft(propdef("foo", "none | <length>", initial="none")),
    }
    ledger = ReconciliationLedger("fam", ignore=set(), todo=set())
    result = TableExtractor().extract_family("fam", [2, 1], lambda f, r: docs[r], ledger)

    by_name = {r.name: r for r in result.records}
    assert list(by_name) == ["foo", "bar"]
    assert by_name["foo"].value == "none | <length>"
    assert by_name["foo"].initial == "none"
    assert by_name["foo"].spec == "css-fam-2"
    assert by_name["bar"].spec == "css-fam-1"
    assert result.url == "https://drafts.csswg.org/css-fam-2/"


def test_ignored_names_are_dropped_and_consumed():
    html = make_draft(propdef("box-sizing", "content-box | border-box"), propdef("cursor", "auto | pointer"))
    overrides = OverrideTables(ignore={"ui": {"box-sizing"}})
    ledger = ReconciliationLedger.for_family("ui", overrides)

    result = TableExtractor().extract_family("ui", [4], lambda f, r: html, ledger)

    assert [r.name for r in result.records] == ["cursor"]
    assert ledger.pending_ignore == set()
    ledger.reconcile()


# --- Reconciliation Ledger ---

def test_unmatched_ignore_entry_is_drift():
    overrides = OverrideTables(ignore={"ui": {"box-sizing", "cursor"}})
    ledger = ReconciliationLedger.for_family("ui", overrides)
    assert ledger.consume_ignored("cursor")

    with pytest.raises(ConfigDriftError) as exc_info:
        ledger.reconcile()
    assert exc_info.value.family == "ui"
    assert exc_info.value.pending == ["box-sizing"]
    assert exc_info.value.table == "ignore"
    assert "box-sizing" in exc_info.value.message


def test_unmatched_todo_entry_is_drift():
    ledger = ReconciliationLedger("grid", ignore=set(), todo={"grid-area", "grid-row"})
    assert ledger.consume_deferred("grid-row")
    assert not ledger.consume_deferred("grid-column")

    with pytest.raises(ConfigDriftError) as exc_info:
        ledger.reconcile()
    assert exc_info.value.pending == ["grid-area"]
    assert exc_info.value.table == "todo"


def test_ledger_is_per_family_copy():
    overrides = OverrideTables(ignore={"ui": {"box-sizing"}})
    ledger = ReconciliationLedger.for_family("ui", overrides)
    ledger.consume_ignored("box-sizing")

    assert overrides.names("ignore", "ui") == {"box-sizing"}
    assert ReconciliationLedger.for_family("ui", overrides).pending_ignore == {"box-sizing"}


def test_module_level_extract():
    result = extract("ui", 4, make_draft(propdef("cursor", "auto | pointer")))
    assert [r.name for r in result.records] == ["cursor"]
