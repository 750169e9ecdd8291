"""
Feature Cross-Referencer: CSS compatibility data from web-features.

Joins the web-features dataset (features keyed by id, each listing the
browser-compat-data keys it covers) with Chrome's CSS property popularity
data, and renders three static lookup tables:

  CSS_FEATURES  compat key → feature record
  GROUPS        group name → compat keys
  SPECS         spec URL   → compat keys

This is a join, not a classifier: values are copied, defaulted and
normalized, never inferred.
"""

import math
import re
from datetime import date, datetime, timezone
from typing import Any, Mapping, Optional, Sequence

from .emitter import escape_string
from .logger import get_module_logger
from .schemas import (
    BROWSERS,
    BaselineStatus,
    BrowserSupport,
    BrowserVersion,
    FeatureRecord,
    FeatureTable,
)

logger = get_module_logger("features")

CSS_KEY_PREFIX = "css."
CSS_PROPERTY_PREFIX = "css.properties."
CANIUSE_URL = "https://caniuse.com/{key}"
VERSION_PATTERN = re.compile(r"^\d+(\.\d+)?$")


# --- Value parsing helpers ---

def parse_baseline_date(value: Any) -> Optional[date]:
    """
    Parse a YYYY-MM-DD baseline date.

    Ranged dates such as "≤2019-01-01" keep only the last four characters of
    the year. Anything malformed yields None.
    """
    parts = str(value or "").split("-")
    if len(parts) != 3:
        return None
    year, month, day = parts
    if len(year) > 4:
        year = year[-4:]
    try:
        return date(int(year), int(month), int(day))
    except ValueError:
        return None


def parse_browser_version(value: Any) -> BrowserVersion:
    """Version string → (major, minor); ranged ("≤79") or missing versions → (0, 0)."""
    if not isinstance(value, str) or not VERSION_PATTERN.match(value):
        return BrowserVersion()
    major, _, minor = value.partition(".")
    return BrowserVersion(major=int(major), minor=int(minor or 0))


def as_list(value: Any) -> list:
    if value is None:
        return []
    return list(value) if isinstance(value, (list, tuple)) else [value]


def _prefer(sub: Mapping, parent: Mapping, key: str) -> Any:
    """The sub-feature's value when it has one, else the parent's."""
    value = sub.get(key)
    return value if value is not None else parent.get(key)


def build_descriptions(dataset: Mapping) -> dict[str, str]:
    """Compat key → description, for the declaration doc comments."""
    descriptions = {}
    for feature in dataset.get("features", {}).values():
        by_compat_key = (feature.get("status") or {}).get("by_compat_key") or {}
        for key, sub in by_compat_key.items():
            if key.startswith(CSS_KEY_PREFIX):
                descriptions[key] = (sub or {}).get("description") or feature.get("description") or ""
    return descriptions


class FeatureCrossReferencer:
    """Builds the CSS feature table from web-features and popularity data."""

    def __init__(self, popularity: Optional[Sequence[Mapping]] = None):
        """
        Args:
            popularity: chromestatus entries ({"property_name", "day_percentage"})
        """
        self._popularity = {
            entry.get("property_name"): entry.get("day_percentage")
            for entry in popularity or []
        }

    def popularity_for(self, property_name: str) -> float:
        """Percentage of page loads using the property; 0 if absent, NaN if unusable."""
        if property_name not in self._popularity:
            return 0.0
        value = self._popularity[property_name]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return math.nan
        return round(value * 100, 4)

    def baseline_status(self, baseline: Any, high_date: Any, low_date: Any, key: str) -> BaselineStatus:
        if baseline == "high":
            since, low_since = parse_baseline_date(high_date), parse_baseline_date(low_date)
            if since and low_since:
                return BaselineStatus(kind="high", since=since, low_since=low_since)
        elif baseline == "low":
            low_since = parse_baseline_date(low_date)
            if low_since:
                return BaselineStatus(kind="low", low_since=low_since)
        elif baseline is False:
            return BaselineStatus(kind="false")
        else:
            return BaselineStatus()

        logger.warning(f"{key}: baseline {baseline!r} without usable dates, treating as unknown")
        return BaselineStatus()

    def build_record(self, feature_id: str, feature: Mapping, key: str, sub: Mapping) -> FeatureRecord:
        """Join one compat key with its parent feature."""
        status = feature.get("status") or {}

        baseline = self.baseline_status(
            _prefer(sub, status, "baseline"),
            _prefer(sub, status, "baseline_high_date"),
            _prefer(sub, status, "baseline_low_date"),
            key
        )

        support = sub.get("support") or (sub.get("status") or {}).get("support") or status.get("support") or {}
        browser_support = BrowserSupport(**{
            browser: parse_browser_version(support.get(browser)) for browser in BROWSERS
        })

        caniuse = [
            CANIUSE_URL.format(key=k)
            for k in as_list(sub.get("caniuse") or feature.get("caniuse"))
            if k
        ]

        specs = [s for s in as_list(feature.get("spec")) if s]
        # Popularity is reported per property; other keys fall back to the feature id
        if key.startswith(CSS_PROPERTY_PREFIX):
            property_name = key[len(CSS_PROPERTY_PREFIX):].split(".")[0]
        else:
            property_name = feature_id

        return FeatureRecord(
            id=key,
            name=feature.get("name") or "",
            description=feature.get("description") or "",
            spec=specs[0] if specs else "",
            groups=[g for g in as_list(feature.get("group")) if g and g != "css"],
            baseline=baseline,
            browser_support=browser_support,
            caniuse=caniuse,
            popularity=self.popularity_for(property_name),
        )

    def build_feature_table(self, dataset: Mapping) -> FeatureTable:
        """
        Build the feature table for every css.* compat key in the dataset.

        Args:
            dataset: web-features data (the "features" mapping is used)

        Returns:
            FeatureTable with records and group/spec indexes
        """
        table = FeatureTable()
        seen = set()

        for feature_id, feature in dataset.get("features", {}).items():
            feature = feature or {}
            by_compat_key = (feature.get("status") or {}).get("by_compat_key") or {}
            for key, sub in by_compat_key.items():
                if not key.startswith(CSS_KEY_PREFIX):
                    continue
                if key in seen:
                    logger.warning(f"{key} is claimed by more than one feature, keeping the first")
                    continue
                seen.add(key)

                table.features.append(self.build_record(feature_id, feature, key, sub or {}))

                for group in as_list(feature.get("group")):
                    if group:
                        table.groups.setdefault(group, []).append(key)
                for spec in as_list(feature.get("spec")):
                    if spec:
                        table.specs.setdefault(spec, []).append(key)

        logger.info(f"Built {len(table.features)} CSS feature records "
                    f"({len(table.groups)} groups, {len(table.specs)} specs)")
        return table


# --- Rendering ---

def _render_date(value: date) -> str:
    return f"NaiveDate::from_ymd_opt({value.year},{value.month},{value.day}).unwrap()"


def render_baseline(status: BaselineStatus) -> str:
    if status.kind == "high":
        return (f"BaselineStatus::High {{ since: {_render_date(status.since)}, "
                f"low_since: {_render_date(status.low_since)} }}")
    if status.kind == "low":
        return f"BaselineStatus::Low({_render_date(status.low_since)})"
    if status.kind == "false":
        return "BaselineStatus::False"
    return "BaselineStatus::Unknown"


def render_browser_support(support: BrowserSupport) -> str:
    lines = ["BrowserSupport {"]
    for browser in BROWSERS:
        version = getattr(support, browser)
        lines.append(f"\t\t\t{browser}: BrowserVersion({version.major}, {version.minor}),")
    lines.append("\t\t}")
    return "\n".join(lines)


def _quoted(values) -> str:
    return ", ".join(f'"{escape_string(v)}"' for v in values)


def _render_index(name: str, index: Mapping[str, list[str]]) -> list[str]:
    lines = [f"pub static {name}: Map<&'static str, &'static [&'static str]> = phf_map! {{"]
    for key, members in index.items():
        if not escape_string(key):
            continue
        lines.append(f'\t"{escape_string(key)}" => &[')
        lines.extend(f'\t\t"{escape_string(member)}",' for member in members)
        lines.append("\t],")
    lines.append("};")
    return lines


def render_feature_table(table: FeatureTable, generated_at: Optional[datetime] = None) -> str:
    """Render the feature table as static phf maps."""
    generated_at = generated_at or datetime.now(timezone.utc)

    lines = [
        "//! Auto-generated CSS features data",
        f"//! Generated on: {generated_at.isoformat()}",
        "",
        "use crate::*;",
        "use phf::{phf_map, Map};",
        "use chrono::NaiveDate;",
        "",
        "pub static CSS_FEATURES: Map<&'static str, CSSFeature> = phf_map! {",
    ]
    for record in table.features:
        popularity = f"{record.popularity:.4f}" if record.popularity_known else "f32::NAN"
        lines += [
            f'\t"{escape_string(record.id)}" => CSSFeature {{',
            f'\t\tid: "{escape_string(record.id)}",',
            f'\t\tname: "{escape_string(record.name)}",',
            f'\t\tdescription: "{escape_string(record.description)}",',
            f'\t\tspec: "{escape_string(record.spec)}",',
            f"\t\tgroups: &[{_quoted(record.groups)}],",
            f"\t\tbaseline_status: {render_baseline(record.baseline)},",
            f"\t\tbrowser_support: {render_browser_support(record.browser_support)},",
            f"\t\tcaniuse: &[{_quoted(record.caniuse)}],",
            f"\t\tpopularity: {popularity},",
            "\t},",
        ]
    lines.append("};")
    lines.append("")
    lines += _render_index("GROUPS", table.groups)
    lines.append("")
    lines += _render_index("SPECS", table.specs)
    return "\n".join(lines) + "\n"
