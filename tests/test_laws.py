"""
Tests for discovered law file generation.
"""

import pytest

from observatory.core import ConfigurationError
from observatory.core.config import LawGenerationConfig
from observatory.laws import DiscoveredLaw, LawFileGenerator, title_case_name


class TestTitleCase:

    @pytest.mark.parametrize("name,expected", [
        ("gravity allocation", "GravityAllocation"),
        ("dark-matter_halo", "DarkMatterHalo"),
        ("ENTROPY", "Entropy"),
        ("law 2", "Law2"),
    ])
    def test_title_case(self, name, expected):
        assert title_case_name(name) == expected

    def test_unusable_name(self):
        with pytest.raises(ConfigurationError):
            title_case_name("--- !")


class TestLawFileGenerator:
    """Rendering law files to disk."""

    def test_path_layout(self, tmp_path):
        gen = LawFileGenerator(LawGenerationConfig(base_path=str(tmp_path)))
        law = DiscoveredLaw("gravity allocation", "physics")
        assert gen.path_for(law) == tmp_path / "physics" / "GravityAllocationLaw.py"

    def test_generate_fills_placeholders(self, tmp_path):
        gen = LawFileGenerator(LawGenerationConfig(base_path=str(tmp_path)))
        path = gen.generate(DiscoveredLaw("gravity allocation", "physics", "F = G*m1*m2/r^2"))

        assert path.exists()
        content = path.read_text(encoding="utf-8")
        assert "{{" not in content
        assert 'LAW_NAME = "gravity allocation"' in content
        assert 'DOMAIN = "physics"' in content
        assert "F = G*m1*m2/r^2" in content

    def test_generate_overwrites(self, tmp_path):
        gen = LawFileGenerator(LawGenerationConfig(base_path=str(tmp_path)))
        gen.generate(DiscoveredLaw("decay", "chemistry", "old"))
        path = gen.generate(DiscoveredLaw("decay", "chemistry", "new"))
        content = path.read_text(encoding="utf-8")
        assert "new" in content
        assert "old" not in content

    def test_custom_template(self, tmp_path):
        template = tmp_path / "law.tmpl"
        template.write_text("{{DOMAIN}}/{{LAW_NAME}}: {{FORMULA}}\n", encoding="utf-8")
        gen = LawFileGenerator(LawGenerationConfig(
            base_path=str(tmp_path / "out"),
            template_path=str(template),
        ))
        path = gen.generate(DiscoveredLaw("power law", "biology", "y = a*x^k"))
        assert path.read_text(encoding="utf-8") == "biology/power law: y = a*x^k\n"
