"""
Runtime settings for the CSS value generator.

Values come from environment variables (the CLI loads a .env file first via
python-dotenv), with defaults matching the layout of the consuming repository.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .overrides import DEFAULT_OVERRIDES_PATH

ENV_PREFIX = "CSS_VALUEGEN_"

# Upstream locations
DRAFTS_TREE_URL = "https://api.github.com/repos/w3c/csswg-drafts/git/trees/main"
DRAFT_URL_TEMPLATE = "https://drafts.csswg.org/css-{family}-{revision}/"
WEB_FEATURES_URL = (
    "https://github.com/web-platform-dx/web-features/releases/latest/download/data.extended.json"
)
POPULARITY_URL = "https://chromestatus.com/data/csspopularity"

# Sentinel family name that selects the feature-table mode
FEATURE_DATA_MODE = "css-feature-data"


class GeneratorSettings(BaseSettings):
    """
    Where to cache, where to write, and how to parse.

    Every field can be set through a CSS_VALUEGEN_<FIELD> variable; the
    GitHub token is read from GITHUB_TOKEN. Keyword arguments win over the
    environment.
    """
    cache_dir: Path = Path(".caches")
    output_dir: Path = Path("crates/css_ast/src/values")
    feature_data_path: Path = Path("crates/css_feature_data/src/data.rs")
    overrides_path: Path = DEFAULT_OVERRIDES_PATH
    # BeautifulSoup tree builder; lxml is faster, html5lib matches browsers
    html_parser: Literal["html5lib", "lxml"] = "html5lib"
    github_token: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("github_token", "GITHUB_TOKEN")
    )

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX, case_sensitive=False, extra="ignore"
    )

    @classmethod
    def from_env(cls, **overrides) -> "GeneratorSettings":
        """Build settings from the environment, applying CLI values that were given."""
        return cls(**{k: v for k, v in overrides.items() if v is not None})
