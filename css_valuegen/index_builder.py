"""
Index of CSS spec families and their revision numbers.

The csswg-drafts repository has one directory per draft, named
css-<family>-<revision> (e.g. css-align-3, css-anchor-position-1).
"""

from typing import Iterable, Mapping

from .config import DRAFT_URL_TEMPLATE, DRAFTS_TREE_URL
from .logger import get_module_logger
from .resource_cache import ResourceCache

logger = get_module_logger("index_builder")

FAMILY_PREFIX = "css-"
INDEX_CACHE_KEY = "index.json"


def build_index(tree_entries: Iterable[Mapping]) -> dict[str, list[int]]:
    """
    Group draft directories into family → ascending revision numbers.

    Args:
        tree_entries: git tree entries with at least "path" and "type"

    Returns:
        Mapping of family name to sorted, de-duplicated revisions
    """
    index: dict[str, list[int]] = {}

    for entry in tree_entries:
        path = entry.get("path", "")
        if entry.get("type") != "tree" or not path.startswith(FAMILY_PREFIX):
            continue

        *parts, revision = path[len(FAMILY_PREFIX):].split("-")
        if not parts or not revision.isdigit():
            logger.debug(f"Skipping {path}: no numeric revision")
            continue

        index.setdefault("-".join(parts), []).append(int(revision))

    # Later revisions amend earlier ones, so processing order must be
    # ascending regardless of listing order
    return {family: sorted(set(revisions)) for family, revisions in index.items()}


def fetch_index(cache: ResourceCache) -> dict[str, list[int]]:
    """Fetch the csswg-drafts tree listing and build the family index."""
    listing = cache.fetch(DRAFTS_TREE_URL, INDEX_CACHE_KEY)
    index = build_index(listing.get("tree", []))
    logger.info(f"Indexed {len(index)} spec families")
    return index


def draft_url(family: str, revision: int) -> str:
    return DRAFT_URL_TEMPLATE.format(family=family, revision=revision)


def draft_cache_key(family: str, revision: int) -> str:
    return f"{family}-{revision}.txt"


def spec_name(family: str, revision: int) -> str:
    return f"{FAMILY_PREFIX}{family}-{revision}"
