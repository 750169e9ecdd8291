"""
Output sync: makes a family's output directory match the rendered module.

Desired state is the module text (or None for "this family defines nothing");
actual state is <output_dir>/<snake_family>/mod.rs. Applying the desired
state is idempotent: unchanged text is left alone, None removes the directory.
"""

import shutil
from pathlib import Path
from typing import Optional, Union

from .emitter import snake
from .logger import get_module_logger

logger = get_module_logger("output")

MODULE_FILE = "mod.rs"


class OutputSync:
    """Applies rendered family modules to the output directory."""

    def __init__(self, output_dir: Union[str, Path]):
        self.output_dir = Path(output_dir)

    def family_dir(self, family: str) -> Path:
        return self.output_dir / snake(family)

    def module_path(self, family: str) -> Path:
        return self.family_dir(family) / MODULE_FILE

    def apply(self, family: str, text: Optional[str]) -> str:
        """
        Bring the family's output in line with `text`.

        Returns:
            What happened: "removed", "absent", "unchanged" or "written"
        """
        family_dir = self.family_dir(family)

        if text is None:
            if family_dir.exists():
                shutil.rmtree(family_dir)
                logger.info(f"Removed {family_dir}")
                return "removed"
            return "absent"

        module_path = self.module_path(family)
        if module_path.exists() and module_path.read_text(encoding="utf-8") == text:
            logger.info(f"{module_path} is up to date")
            return "unchanged"

        family_dir.mkdir(parents=True, exist_ok=True)
        module_path.write_text(text, encoding="utf-8")
        logger.info(f"Wrote {module_path}")
        return "written"

    def write_file(self, path: Union[str, Path], text: str) -> Path:
        """Replace a single generated file (used for the feature table)."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        logger.info(f"Generated {path}")
        return path
