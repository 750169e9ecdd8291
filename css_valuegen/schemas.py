"""
Pydantic schemas defining the contracts between pipeline stages.

PropertyRecord: Contract from the Table Extractor to the Classifier and Emitter
Classification: Output of the Grammar Classifier
FeatureRecord / FeatureTable: Output of the Feature Cross-Referencer

Data flow through the pipeline:
  Index → TableExtractor → PropertyRecord list → GrammarClassifier → Classification
  PropertyRecord + Classification → DeclarationEmitter → module text
  web-features dataset → FeatureCrossReferencer → FeatureTable → feature data text
"""

import math
from datetime import date
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field


NOT_ANIMATABLE = "not animatable"


# --- Declaration pipeline models ---

class PropertyRecord(BaseModel):
    """One property as defined by the highest-precedence revision that defines it."""
    name: str                                   # lowercase, hyphenated, or "--*"
    value: str                                  # raw value grammar
    initial: str = ""
    applies_to: str = ""
    inherited: str = ""
    percentages: str = ""
    canonical_order: str = ""
    animation_type: str = NOT_ANIMATABLE
    # Provenance: which draft revision this definition came from
    spec: str = Field(default="", description="Short spec name, e.g. css-align-3")
    url: str = Field(default="", description="Draft URL of the defining revision")


class RevisionExtraction(BaseModel):
    """Everything the extractor learns from one revision's document."""
    family: str
    revision: int
    spec: str
    url: str
    title: str = ""
    has_property_index: bool = True
    records: list[PropertyRecord] = Field(default_factory=list)


class FamilyExtraction(BaseModel):
    """Merged view of all revisions of a family, ready for emission."""
    family: str
    title: str = ""
    spec: str = ""
    url: str = ""
    records: list[PropertyRecord] = Field(default_factory=list)


class Shape(str, Enum):
    """Structural shape of a property's grammar."""
    ENUM = "enum"
    STRUCT = "struct"


class Classification(BaseModel):
    """Derived per run from PropertyRecord.value and the override tables."""
    shape: Shape
    needs_borrow: bool = False

    @property
    def is_enum(self) -> bool:
        return self.shape is Shape.ENUM


# --- Feature data models ---

class BaselineStatus(BaseModel):
    """
    Baseline status of a feature.

    kind:
      unknown → the dataset says nothing
      false   → explicitly not baseline
      low     → newly available since `low_since`
      high    → widely available since `since` (newly available since `low_since`)
    """
    kind: Literal["unknown", "false", "low", "high"] = "unknown"
    since: Optional[date] = None
    low_since: Optional[date] = None


class BrowserVersion(BaseModel):
    """Minimum supporting version; (0, 0) means unknown or unsupported."""
    major: int = 0
    minor: int = 0


class BrowserSupport(BaseModel):
    chrome: BrowserVersion = Field(default_factory=BrowserVersion)
    chrome_android: BrowserVersion = Field(default_factory=BrowserVersion)
    edge: BrowserVersion = Field(default_factory=BrowserVersion)
    firefox: BrowserVersion = Field(default_factory=BrowserVersion)
    firefox_android: BrowserVersion = Field(default_factory=BrowserVersion)
    safari: BrowserVersion = Field(default_factory=BrowserVersion)
    safari_ios: BrowserVersion = Field(default_factory=BrowserVersion)


BROWSERS = list(BrowserSupport.model_fields)


class FeatureRecord(BaseModel):
    """One CSS compatibility key joined with its web-features entry."""
    id: str                                         # compat key, e.g. css.properties.width
    name: str = ""
    description: str = ""
    spec: str = ""                                  # originating spec URL
    groups: list[str] = Field(default_factory=list)
    baseline: BaselineStatus = Field(default_factory=BaselineStatus)
    browser_support: BrowserSupport = Field(default_factory=BrowserSupport)
    caniuse: list[str] = Field(default_factory=list)
    popularity: float = 0.0                         # 0-100, NaN when unknown

    @property
    def popularity_known(self) -> bool:
        return not math.isnan(self.popularity)


class FeatureTable(BaseModel):
    """The three static lookup structures of the feature data output."""
    features: list[FeatureRecord] = Field(default_factory=list)
    groups: dict[str, list[str]] = Field(default_factory=dict)
    specs: dict[str, list[str]] = Field(default_factory=dict)
