"""
Tests for skill registry.

Tests verify that:
- Registry discovers and lists skills
- Search matches names and content case-insensitively
- Skill matching recommends relevant skills
- Statistics reflect the catalog on disk
"""

import pathlib as _pathlib
import unittest.mock as _mock

import pytest as _pytest

import aetherskills.skills.discovery as discovery
import aetherskills.skills.errors as errors
import aetherskills.skills.registry as registry
import aetherskills.skills.tokens as tokens


def _registry(catalog: _pathlib.Path) -> registry.SkillRegistry:
    disc = discovery.SkillDiscovery(catalog, search_paths=[catalog])
    return registry.SkillRegistry(disc)


class TestSkillLookup:
    """Tests for listing and lookup."""

    def test_lists_discovered_skills_sorted(self, catalog: _pathlib.Path) -> None:
        names = [s.name for s in _registry(catalog).list_skills()]
        assert names == [
            "bdd-scenario-writer",
            "broken-skill",
            "contract-testing",
            "spec-parser",
        ]

    def test_get_and_has_skill(self, catalog: _pathlib.Path) -> None:
        reg = _registry(catalog)

        skill = reg.get_skill("spec-parser")
        assert skill is not None
        assert skill.description == "Use when extracting requirements from a specification"
        assert reg.has_skill("spec-parser") is True
        assert reg.has_skill("nonexistent") is False

    def test_require_skill_raises_for_unknown(self, catalog: _pathlib.Path) -> None:
        with _pytest.raises(errors.SkillNotFoundError, match="Skill not found: ghost"):
            _registry(catalog).require_skill("ghost")

    def test_discovery_happens_once(self, catalog: _pathlib.Path) -> None:
        reg = _registry(catalog)
        with _mock.patch.object(
            reg.discovery, "discover", wraps=reg.discovery.discover
        ) as spy:
            reg.list_skills()
            reg.get_skill("spec-parser")
            assert spy.call_count == 1

            reg.discover()
            assert spy.call_count == 2


class TestSearch:
    """Tests for SkillRegistry.search."""

    def test_matches_name(self, catalog: _pathlib.Path) -> None:
        names = [s.name for s in _registry(catalog).search("CONTRACT")]
        assert names == ["contract-testing"]

    def test_matches_content(self, catalog: _pathlib.Path) -> None:
        names = [s.name for s in _registry(catalog).search("gherkin")]
        assert names == ["bdd-scenario-writer"]

    def test_matches_body_text(self, catalog: _pathlib.Path) -> None:
        # Every standard body has a Common Mistakes section
        assert len(_registry(catalog).search("common mistakes")) == 4

    def test_no_match(self, catalog: _pathlib.Path) -> None:
        assert _registry(catalog).search("kubernetes") == []

    def test_empty_term_rejected(self, catalog: _pathlib.Path) -> None:
        with _pytest.raises(ValueError, match="search term"):
            _registry(catalog).search("   ")


class TestFindMatchingSkills:
    """Tests for keyword recommendation."""

    def test_name_mention_scores_highest(self, catalog: _pathlib.Path) -> None:
        matches = _registry(catalog).find_matching_skills(
            "Set up contract testing between the consumer services"
        )
        assert matches[0].name == "contract-testing"

    def test_description_words_match(self, catalog: _pathlib.Path) -> None:
        matches = _registry(catalog).find_matching_skills("write gherkin scenarios")
        assert [m.name for m in matches] == ["bdd-scenario-writer"]

    def test_respects_max_results(self, catalog: _pathlib.Path) -> None:
        matches = _registry(catalog).find_matching_skills(
            "spec-parser contract-testing bdd-scenario-writer", max_results=2
        )
        assert len(matches) == 2

    def test_no_match_returns_empty(self, catalog: _pathlib.Path) -> None:
        assert _registry(catalog).find_matching_skills("zzz") == []

    def test_description_prefix_words_do_not_match(self, catalog: _pathlib.Path) -> None:
        """Every description starts with "Use when", so those words carry no topic."""
        assert _registry(catalog).find_matching_skills("what to do when the build is red") == []

    def test_matches_whole_words_only(
        self, tmp_path: _pathlib.Path, write_skill
    ) -> None:
        root = tmp_path / "skills"
        write_skill(root, "flaky-test-triage", "Use when a test fails intermittently")
        reg = _registry(root)

        assert reg.find_matching_skills("pick the latest release") == []
        assert [s.name for s in reg.find_matching_skills("one test fails")] == [
            "flaky-test-triage"
        ]

    def test_name_phrase_needs_word_boundaries(
        self, catalog: _pathlib.Path
    ) -> None:
        reg = _registry(catalog)
        assert reg.find_matching_skills("add contract testing")[0].name == "contract-testing"
        assert reg.find_matching_skills("recontract testingly") == []

    def test_tags_match_as_phrases(self, tmp_path: _pathlib.Path, write_skill) -> None:
        root = tmp_path / "skills"
        write_skill(
            root,
            "pipeline-design",
            "Use when designing delivery pipelines",
            extra_frontmatter="tags: [continuous integration, ci]\n",
        )
        reg = _registry(root)

        assert [s.name for s in reg.find_matching_skills("set up continuous integration")] == [
            "pipeline-design"
        ]
        assert reg.find_matching_skills("a continuous stream") == []


class TestStats:
    """Tests for catalog statistics."""

    def test_counts_valid_and_invalid(self, catalog: _pathlib.Path) -> None:
        (catalog / "no-skill-file").mkdir()

        stats = _registry(catalog).stats()

        assert stats.total == 5
        assert stats.valid == 3
        assert stats.invalid == 2
        assert stats.sources == {"catalog": 4}

    def test_section_coverage(self, catalog: _pathlib.Path) -> None:
        stats = _registry(catalog).stats()

        assert stats.section_coverage["Overview"] == 4
        assert stats.section_coverage["When to Use"] == 4
        assert stats.section_coverage["Quick Reference"] == 0

    def test_largest_sorted_by_lines(self, catalog: _pathlib.Path, write_skill) -> None:
        write_skill(catalog, "huge-skill", body="## Overview\n" + "x\n" * 50)

        stats = _registry(catalog).stats()

        assert stats.largest[0] == ("huge-skill", 51)
        assert stats.total_body_lines == sum(n for _, n in stats.largest)
        assert stats.average_body_lines > 0

    def test_token_estimates_use_counter(self, catalog: _pathlib.Path) -> None:
        encoder = _mock.Mock()
        encoder.encode.side_effect = lambda text: text.split()
        counter = tokens.SkillTokenCounter(encoder=encoder)

        stats = _registry(catalog).stats(token_counter=counter)

        assert stats.token_estimates is not None
        assert len(stats.token_estimates) == 4
        assert stats.total_metadata_tokens == sum(
            e.metadata_tokens for e in stats.token_estimates
        )
        assert stats.to_dict()["tokens"]["body_total"] == stats.total_body_tokens

    def test_figures_cover_catalog_skills_only(
        self, catalog: _pathlib.Path, tmp_path: _pathlib.Path, write_skill
    ) -> None:
        extra = tmp_path / "extra"
        write_skill(extra, "installed-elsewhere", body="## Overview\n" + "x\n" * 80)
        encoder = _mock.Mock()
        encoder.encode.side_effect = lambda text: text.split()
        disc = discovery.SkillDiscovery(catalog, search_paths=[extra, catalog])

        stats = registry.SkillRegistry(disc).stats(
            token_counter=tokens.SkillTokenCounter(encoder=encoder)
        )

        assert (stats.total, stats.valid) == (4, 3)
        assert stats.sources == {"custom": 1, "catalog": 4}
        assert stats.measured == 4
        assert "installed-elsewhere" not in [name for name, _ in stats.largest]
        assert stats.section_coverage["Overview"] == 4
        assert [e.name for e in stats.token_estimates] == [
            "bdd-scenario-writer",
            "broken-skill",
            "contract-testing",
            "spec-parser",
        ]
        assert stats.average_body_lines == stats.total_body_lines / 4

    def test_stats_without_tokens_omit_token_section(self, catalog: _pathlib.Path) -> None:
        data = _registry(catalog).stats().to_dict()
        assert "tokens" not in data
        assert data["invalid"] == 1


class TestValidateCatalog:
    def test_missing_catalog_raises(self, tmp_path: _pathlib.Path) -> None:
        reg = _registry(tmp_path / "missing")
        with _pytest.raises(errors.SkillsDirectoryNotFoundError, match="not found"):
            reg.validate_catalog()

    def test_returns_results(self, catalog: _pathlib.Path) -> None:
        results = _registry(catalog).validate_catalog()
        assert len(results) == 4


def test_to_dict(catalog: _pathlib.Path) -> None:
    data = _registry(catalog).to_dict()
    assert data["catalog_dir"] == str(catalog)
    assert data["skill_count"] == 4
    assert [s["name"] for s in data["skills"]][0] == "bdd-scenario-writer"
