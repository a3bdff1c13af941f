"""Law-file generation collaborator."""

from .generator import (
    DiscoveredLaw,
    LawFileGenerator,
    DEFAULT_TEMPLATE,
    title_case_name,
)

__all__ = [
    "DiscoveredLaw",
    "LawFileGenerator",
    "DEFAULT_TEMPLATE",
    "title_case_name",
]
