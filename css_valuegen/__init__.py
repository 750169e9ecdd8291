"""
CSS Value Generator

Generates typed style value declarations from the CSS Working Group drafts.
- Extractor:  property definition tables from each draft revision
- Classifier: enum vs struct shape and borrow requirement per grammar
- Emitter:    one declaration block per property, one module per family

Public API surface:
  Orchestration:   ValueGenerator, GeneratorSettings
  Pipeline stages: TableExtractor, GrammarClassifier, ReconciliationLedger,
                   DeclarationEmitter, OutputSync, FeatureCrossReferencer
  Data models:     PropertyRecord, Classification, Shape, FeatureRecord
  Configuration:   OverrideTables, load_overrides
  Error types:     ValueGenError and its subclasses (all fatal)
"""

# --- Orchestration ---
from .main import ValueGenerator
from .config import GeneratorSettings, FEATURE_DATA_MODE

# --- Pipeline stages ---
from .resource_cache import ResourceCache
from .index_builder import build_index, fetch_index
from .extractor import TableExtractor
from .classifier import GrammarClassifier, infer_shape, infer_borrow
from .ledger import ReconciliationLedger
from .emitter import DeclarationEmitter, render_module
from .output import OutputSync
from .features import FeatureCrossReferencer, build_descriptions, render_feature_table

# --- Data models ---
from .schemas import PropertyRecord, Classification, Shape, FeatureRecord, FeatureTable

# --- Configuration ---
from .overrides import OverrideTables, load_overrides

# --- Exceptions ---
from .exceptions import (
    ValueGenError,
    ConfigConflictError,
    ConfigDriftError,
    DocumentShapeError,
    FetchError,
    UsageError,
)

__version__ = "0.1.0"
__all__ = [
    "ValueGenerator",
    "GeneratorSettings",
    "FEATURE_DATA_MODE",
    "ResourceCache",
    "build_index",
    "fetch_index",
    "TableExtractor",
    "GrammarClassifier",
    "infer_shape",
    "infer_borrow",
    "ReconciliationLedger",
    "DeclarationEmitter",
    "render_module",
    "OutputSync",
    "FeatureCrossReferencer",
    "build_descriptions",
    "render_feature_table",
    "PropertyRecord",
    "Classification",
    "Shape",
    "FeatureRecord",
    "FeatureTable",
    "OverrideTables",
    "load_overrides",
    "ValueGenError",
    "ConfigConflictError",
    "ConfigDriftError",
    "DocumentShapeError",
    "FetchError",
    "UsageError",
]
