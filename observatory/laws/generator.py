"""Law File Generator - write source stubs for discovered laws.

Each discovered law becomes a Python module at

    {base_path}/{domain}/{TitleCasedName}Law.py

rendered from a template with {{LAW_NAME}}, {{FORMULA}} and {{DOMAIN}}
placeholders. Nothing in the observatory core reads these files back.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..core.config import LawGenerationConfig
from ..core.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = '''"""{{LAW_NAME}} - discovered law in the {{DOMAIN}} domain.

Formula: {{FORMULA}}
"""

LAW_NAME = "{{LAW_NAME}}"
DOMAIN = "{{DOMAIN}}"
FORMULA = "{{FORMULA}}"
'''


@dataclass
class DiscoveredLaw:
    """A law reported by the research layer."""
    name: str
    domain: str
    formula: str = ""


def title_case_name(name: str) -> str:
    """'gravity allocation' -> 'GravityAllocation'."""
    words = [w for w in re.split(r"[^0-9A-Za-z]+", name) if w]
    if not words:
        raise ConfigurationError(f"Law name {name!r} has no usable characters")
    return "".join(w[0].upper() + w[1:].lower() for w in words)


class LawFileGenerator:
    """Renders discovered laws into files under a base directory."""

    def __init__(self, config: Optional[LawGenerationConfig] = None):
        self.config = config or LawGenerationConfig()

    @property
    def base_path(self) -> Path:
        return Path(self.config.base_path).expanduser()

    def _template(self) -> str:
        if self.config.template_path:
            return Path(self.config.template_path).expanduser().read_text(encoding="utf-8")
        return DEFAULT_TEMPLATE

    def path_for(self, law: DiscoveredLaw) -> Path:
        return self.base_path / law.domain / f"{title_case_name(law.name)}Law.py"

    def generate(self, law: DiscoveredLaw) -> Path:
        """
        Write the law file, replacing any previous version.

        Returns:
            Path of the written file
        """
        path = self.path_for(law)
        content = (
            self._template()
            .replace("{{LAW_NAME}}", law.name)
            .replace("{{FORMULA}}", law.formula)
            .replace("{{DOMAIN}}", law.domain)
        )

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")

        logger.info(f"Generated law file {path}")
        return path
