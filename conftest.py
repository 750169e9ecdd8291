"""
Shared fixtures: synthetic CSS drafts, datasets and a pre-populated cache.

Drafts are built in the shape bikeshed renders: propdef tables, then a
#property-index heading followed by a wrapper holding the index table.
"""

import html
import json

import pytest

from css_valuegen.config import GeneratorSettings
from css_valuegen.overrides import OverrideTables
from css_valuegen.resource_cache import ResourceCache

ROW_LABELS = {
    "name": "Name",
    "value": "Value",
    "new_values": "New values",
    "initial": "Initial",
    "applies_to": "Applies to",
    "inherited": "Inherited",
    "percentages": "Percentages",
    "computed_value": "Computed value",
    "canonical_order": "Canonical order",
    "animation_type": "Animation type",
}

DEFAULT_FIELDS = {
    "initial": "auto",
    "applies_to": "all elements",
    "inherited": "no",
    "percentages": "N/A",
    "canonical_order": "per grammar",
}


def propdef(name, value=None, **fields):
    """One propdef table. Pass new_values=... instead of value for an extension table."""
    row_values = {"name": name}
    if value is not None:
        row_values["value"] = value
    for key, default in DEFAULT_FIELDS.items():
        row_values[key] = fields.pop(key, default)
    row_values.update(fields)

    rows = "\n".join(
        f"<tr><th>{ROW_LABELS[key]}:</th><td>{html.escape(text)}</td></tr>"
        for key, text in row_values.items()
    )
    return f'<table class="def propdef" data-link-for-hint="{html.escape(name)}"><tbody>\n{rows}\n</tbody></table>'


def make_draft(*tables, title="CSS Test Module Level 1", index_tables=1, with_index=True):
    """A rendered draft with the given propdef tables."""
    index = ""
    if with_index:
        tables_html = "".join(
            '<table class="index"><thead><tr><th>Name</th><th>Value</th></tr></thead></table>'
            for _ in range(index_tables)
        )
        index = (
            '<h2 class="no-num no-ref heading" id="property-index">Property Index</h2>\n'
            f'<div class="big-element-wrapper">{tables_html}</div>'
        )
    body = "\n".join(tables)
    return f"""<!doctype html>
<html lang="en">
<head><meta charset="utf-8"><title>{title}</title></head>
<body>
<h1 class="p-name no-ref" id="title">{title}</h1>
<section>
{body}
</section>
{index}
</body>
</html>"""


def tree_listing(*paths):
    """GitHub git-tree listing with one directory per path."""
    return {
        "sha": "0" * 40,
        "tree": [{"path": p, "type": "tree", "mode": "040000"} for p in paths]
        + [{"path": "README.md", "type": "blob", "mode": "100644"}],
    }


class ExplodingSession:
    """HTTP session that fails the test if anything is fetched."""

    def get(self, url, **kwargs):
        raise AssertionError(f"unexpected network fetch: {url}")


@pytest.fixture
def overrides():
    return OverrideTables()


@pytest.fixture
def cache_dir(tmp_path):
    path = tmp_path / "caches"
    path.mkdir()
    return path


@pytest.fixture
def seed_cache(cache_dir):
    """Write resources into the cache directory under their cache keys."""

    def seed(key, content):
        text = content if isinstance(content, str) else json.dumps(content)
        (cache_dir / key).write_text(text, encoding="utf-8")

    return seed


@pytest.fixture
def offline_cache(cache_dir):
    return ResourceCache(cache_dir, session=ExplodingSession())


@pytest.fixture
def settings(tmp_path, cache_dir):
    return GeneratorSettings(
        cache_dir=cache_dir,
        output_dir=tmp_path / "values",
        feature_data_path=tmp_path / "feature_data" / "data.rs",
    )
