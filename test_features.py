"""
Tests for the Feature Cross-Referencer.
"""

import math
from datetime import date, datetime, timezone

import pytest

from css_valuegen.features import (
    FeatureCrossReferencer,
    build_descriptions,
    parse_baseline_date,
    parse_browser_version,
    render_feature_table,
)
from css_valuegen.schemas import BrowserVersion

DATASET = {
    "features": {
        "align-content-block": {
            "name": "align-content in block layouts",
            "description": "The align-content CSS property sets alignment in block containers.",
            "spec": "https://drafts.csswg.org/css-align-3/#distribution-block",
            "group": "css",
            "caniuse": "mdn-css_properties_align-content_block_context",
            "status": {
                "baseline": "low",
                "baseline_low_date": "2024-03-19",
                "support": {"chrome": "123", "edge": "123", "firefox": "125", "safari": "17.4"},
                "by_compat_key": {
                    "css.properties.align-content.block_context": {
                        "baseline": "low",
                        "baseline_low_date": "2024-03-19",
                        "support": {"chrome": "123", "safari": "17.4"},
                    },
                },
            },
        },
        "flexbox": {
            "name": "Flexbox",
            "description": "Flexbox is a one-dimensional layout system.",
            "spec": ["https://drafts.csswg.org/css-flexbox-1/", "https://drafts.csswg.org/css-align-3/"],
            "group": ["flexbox", "layout"],
            "status": {
                "baseline": "high",
                "baseline_high_date": "2017-03-21",
                "baseline_low_date": "2015-09-30",
                "support": {"chrome": "29", "firefox": "28", "safari": "9", "safari_ios": "9"},
                "by_compat_key": {
                    "css.properties.flex": {
                        "baseline": "high",
                        "baseline_high_date": "≤2018-07-29",
                        "baseline_low_date": "≤2016-01-29",
                        "support": {"chrome": "29", "edge": "≤79"},
                    },
                    "css.properties.flex-basis": {},
                    "api.CSSStyleDeclaration.flex": {"baseline": False},
                },
            },
        },
        "text-wrap-pretty": {
            "name": "text-wrap: pretty",
            "description": "Balances the last lines of paragraphs.",
            "status": {
                "baseline": False,
                "support": {"chrome": "117"},
                "by_compat_key": {
                    "css.properties.text-wrap.pretty": {"baseline": False},
                },
            },
        },
    }
}

POPULARITY = [
    {"property_name": "flex", "day_percentage": 0.4512},
    {"property_name": "flex-basis", "day_percentage": None},
]


@pytest.mark.parametrize("value, expected", [
    ("2024-03-19", date(2024, 3, 19)),
    ("≤2018-07-29", date(2018, 7, 29)),
    ("2024-13-01", None),
    ("2024-03", None),
    ("", None),
    (None, None),
])
def test_parse_baseline_date(value, expected):
    assert parse_baseline_date(value) == expected


@pytest.mark.parametrize("value, expected", [
    ("123", BrowserVersion(major=123, minor=0)),
    ("17.4", BrowserVersion(major=17, minor=4)),
    ("≤79", BrowserVersion()),
    ("preview", BrowserVersion()),
    (None, BrowserVersion()),
])
def test_parse_browser_version(value, expected):
    assert parse_browser_version(value) == expected


def test_only_css_keys_are_included():
    table = FeatureCrossReferencer(POPULARITY).build_feature_table(DATASET)
    assert [f.id for f in table.features] == [
        "css.properties.align-content.block_context",
        "css.properties.flex",
        "css.properties.flex-basis",
        "css.properties.text-wrap.pretty",
    ]


def test_sub_feature_baseline_is_preferred():
    features = {f.id: f for f in FeatureCrossReferencer(POPULARITY).build_feature_table(DATASET).features}

    flex = features["css.properties.flex"]
    assert flex.baseline.kind == "high"
    assert flex.baseline.since == date(2018, 7, 29)
    assert flex.baseline.low_since == date(2016, 1, 29)

    # No sub-feature data: the parent feature's status applies
    flex_basis = features["css.properties.flex-basis"]
    assert flex_basis.baseline.since == date(2017, 3, 21)
    assert flex_basis.browser_support.safari_ios == BrowserVersion(major=9, minor=0)

    assert features["css.properties.text-wrap.pretty"].baseline.kind == "false"


def test_browser_support_and_metadata():
    features = {f.id: f for f in FeatureCrossReferencer(POPULARITY).build_feature_table(DATASET).features}

    align = features["css.properties.align-content.block_context"]
    assert align.browser_support.safari == BrowserVersion(major=17, minor=4)
    assert align.browser_support.firefox == BrowserVersion()
    assert align.groups == []
    assert align.caniuse == ["https://caniuse.com/mdn-css_properties_align-content_block_context"]
    assert align.spec == "https://drafts.csswg.org/css-align-3/#distribution-block"

    flex = features["css.properties.flex"]
    assert flex.browser_support.edge == BrowserVersion()
    assert flex.groups == ["flexbox", "layout"]
    assert flex.spec == "https://drafts.csswg.org/css-flexbox-1/"


def test_popularity_lookup():
    features = {f.id: f for f in FeatureCrossReferencer(POPULARITY).build_feature_table(DATASET).features}
    assert features["css.properties.flex"].popularity == pytest.approx(45.12)
    assert math.isnan(features["css.properties.flex-basis"].popularity)
    assert features["css.properties.text-wrap.pretty"].popularity == 0.0


def test_group_and_spec_indexes():
    table = FeatureCrossReferencer(POPULARITY).build_feature_table(DATASET)
    assert table.groups["flexbox"] == ["css.properties.flex", "css.properties.flex-basis"]
    assert table.groups["css"] == ["css.properties.align-content.block_context"]
    assert table.specs["https://drafts.csswg.org/css-align-3/"] == [
        "css.properties.flex", "css.properties.flex-basis"
    ]


def test_build_descriptions():
    descriptions = build_descriptions(DATASET)
    assert descriptions["css.properties.flex"] == "Flexbox is a one-dimensional layout system."
    assert "api.CSSStyleDeclaration.flex" not in descriptions


def test_render_feature_table():
    table = FeatureCrossReferencer(POPULARITY).build_feature_table(DATASET)
    text = render_feature_table(table, generated_at=datetime(2026, 1, 2, tzinfo=timezone.utc))

    assert text.startswith("//! Auto-generated CSS features data\n//! Generated on: 2026-01-02T00:00:00+00:00\n")
    assert "pub static CSS_FEATURES: Map<&'static str, CSSFeature> = phf_map! {" in text
    assert '\t"css.properties.flex" => CSSFeature {' in text
    assert ("baseline_status: BaselineStatus::High { since: NaiveDate::from_ymd_opt(2018,7,29).unwrap(), "
            "low_since: NaiveDate::from_ymd_opt(2016,1,29).unwrap() },") in text
    assert "baseline_status: BaselineStatus::Low(NaiveDate::from_ymd_opt(2024,3,19).unwrap())," in text
    assert "baseline_status: BaselineStatus::False," in text
    assert "\t\t\tsafari: BrowserVersion(17, 4)," in text
    assert "popularity: 45.1200," in text
    assert "popularity: f32::NAN," in text
    assert 'groups: &["flexbox", "layout"],' in text
    assert "pub static GROUPS: Map<&'static str, &'static [&'static str]> = phf_map! {" in text
    assert "pub static SPECS: Map<&'static str, &'static [&'static str]> = phf_map! {" in text
