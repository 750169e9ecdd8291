"""
Main orchestrator for the CSS value generator.

Coordinates the pipeline for one spec family:
Index → TableExtractor → GrammarClassifier → DeclarationEmitter → ledger check
→ OutputSync. The feature-data mode is a separate entry point that shares
only the ResourceCache.
"""

from typing import Optional

from .classifier import GrammarClassifier
from .config import (
    FEATURE_DATA_MODE,
    POPULARITY_URL,
    WEB_FEATURES_URL,
    GeneratorSettings,
)
from .emitter import DeclarationEmitter
from .exceptions import UsageError
from .extractor import TableExtractor
from .features import FeatureCrossReferencer, build_descriptions, render_feature_table
from .index_builder import draft_cache_key, draft_url, fetch_index
from .ledger import ReconciliationLedger
from .logger import get_module_logger, setup_logger
from .output import OutputSync
from .overrides import OverrideTables, load_overrides
from .resource_cache import ResourceCache

logger = get_module_logger("main")

WEB_FEATURES_CACHE_KEY = "web-features-data.extended.json"
POPULARITY_CACHE_KEY = "popularity.json"


class ValueGenerator:
    """
    Main orchestrator for value generation.

    Every stage is injectable so tests can run the whole pipeline against a
    pre-populated cache directory.
    """

    def __init__(
        self,
        settings: Optional[GeneratorSettings] = None,
        cache: Optional[ResourceCache] = None,
        overrides: Optional[OverrideTables] = None,
        log_level: int = None
    ):
        if log_level is not None:
            setup_logger(level=log_level)

        self.settings = settings or GeneratorSettings.from_env()
        self.cache = cache or ResourceCache(
            self.settings.cache_dir,
            github_token=self.settings.github_token
        )
        self.overrides = overrides or load_overrides(self.settings.overrides_path)

        self.extractor = TableExtractor(parser=self.settings.html_parser)
        self.classifier = GrammarClassifier(self.overrides)
        self.emitter = DeclarationEmitter(self.overrides)
        self.output = OutputSync(self.settings.output_dir)

        logger.debug("ValueGenerator initialized")

    # --- Resources ---

    def fetch_document(self, family: str, revision: int) -> str:
        return self.cache.fetch_text(draft_url(family, revision), draft_cache_key(family, revision))

    def fetch_web_features(self) -> dict:
        return self.cache.fetch(WEB_FEATURES_URL, WEB_FEATURES_CACHE_KEY)

    def fetch_popularity(self) -> list:
        return self.cache.fetch(POPULARITY_URL, POPULARITY_CACHE_KEY)

    # --- Declarations ---

    def render_family(self, name: str) -> Optional[str]:
        """
        Run extraction, classification and emission for one family.

        Returns:
            Module text, or None when the family defines no properties

        Raises:
            UsageError: unknown or empty family name
            ConfigConflictError, ConfigDriftError, DocumentShapeError, FetchError
        """
        if not name:
            raise UsageError("Supply a working draft name")

        index = fetch_index(self.cache)
        if name not in index:
            raise UsageError(
                f"Supplied name {name} doesn't seem to be a valid working draft",
                family=name
            )

        # Table-level conflicts abort before any draft is read
        self.overrides.check_conflicts(name)

        logger.info(f"Generating {name} (revisions {index[name]})")
        descriptions = build_descriptions(self.fetch_web_features())
        ledger = ReconciliationLedger.for_family(name, self.overrides)

        # Stage 1: merge property definitions across revisions
        extraction = self.extractor.extract_family(name, index[name], self.fetch_document, ledger)

        # Stage 2: classify every surviving record (conflicts abort here)
        classifications = {
            record.name: self.classifier.classify(name, record.name, record.value)
            for record in extraction.records
        }

        # Stage 3: render, then make sure no override entry went unmatched
        text = self.emitter.emit(extraction, classifications, descriptions, ledger)
        ledger.reconcile()
        return text

    def generate_family(self, name: str, dry_run: bool = False) -> str:
        """Render a family and sync its output directory. Returns the sync action."""
        text = self.render_family(name)
        if dry_run:
            logger.info(f"Dry run: {name} would be {'removed' if text is None else 'written'}")
            return "dry-run"
        return self.output.apply(name, text)

    # --- Feature data ---

    def render_feature_data(self) -> str:
        referencer = FeatureCrossReferencer(self.fetch_popularity())
        table = referencer.build_feature_table(self.fetch_web_features())
        return render_feature_table(table)

    def generate_feature_data(self, dry_run: bool = False) -> str:
        text = self.render_feature_data()
        if dry_run:
            logger.info("Dry run: feature data not written")
            return "dry-run"
        self.output.write_file(self.settings.feature_data_path, text)
        return "written"

    def run(self, name: str, dry_run: bool = False) -> str:
        """Dispatch on the invocation mode: the feature-data sentinel or a family name."""
        if name == FEATURE_DATA_MODE:
            return self.generate_feature_data(dry_run=dry_run)
        return self.generate_family(name, dry_run=dry_run)


def generate(name: str, settings: Optional[GeneratorSettings] = None) -> str:
    """Convenience function to run one generation."""
    return ValueGenerator(settings=settings).run(name)
