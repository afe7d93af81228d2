"""
Tests for engine configuration.
"""

import json
import os

import pytest

from policywatch.config import DEFAULT_CONFIG, EngineConfig
from policywatch.env import load_env
from policywatch.similarity import phrase_weighted, unigram_jaccard


class TestEngineConfig:

    def test_defaults(self):
        config = EngineConfig()
        assert config.structural_similarity_threshold == 0.90
        assert config.sentence_match_threshold == 0.7
        assert config.strict_match_threshold == 0.8
        assert config.real_change_similarity_cutoff == 0.80
        assert (config.major_change_threshold, config.moderate_change_threshold,
                config.minor_change_threshold) == (20, 10, 5)
        assert config.hash_bits == 32
        assert not config.empty_core_is_structural
        assert config.similarity is phrase_weighted

    def test_with_overrides(self):
        config = DEFAULT_CONFIG.with_overrides(similarity_strategy="unigram")
        assert config.similarity is unigram_jaccard
        assert DEFAULT_CONFIG.similarity_strategy == "phrase_weighted"

    @pytest.mark.parametrize("overrides", [
        {"structural_similarity_threshold": 1.5},
        {"sentence_match_threshold": -0.1},
        {"major_change_threshold": 5, "moderate_change_threshold": 10},
        {"minor_change_threshold": -1},
        {"similarity_strategy": "levenshtein"},
        {"hash_bits": 16},
    ])
    def test_invalid_values_rejected(self, overrides):
        with pytest.raises(ValueError):
            EngineConfig(**overrides)


class TestFromEnv:

    def test_empty_environment_gives_defaults(self):
        assert EngineConfig.from_env({}) == EngineConfig()

    def test_reads_prefixed_variables(self):
        config = EngineConfig.from_env({
            "POLICYWATCH_STRUCTURAL_SIMILARITY_THRESHOLD": "0.95",
            "POLICYWATCH_MAJOR_CHANGE_THRESHOLD": "30",
            "POLICYWATCH_EMPTY_CORE_IS_STRUCTURAL": "yes",
            "POLICYWATCH_SIMILARITY_STRATEGY": "unigram",
            "POLICYWATCH_HASH_BITS": "64",
            "POLICYWATCH_MINOR_CHANGE_THRESHOLD": "  ",
        })
        assert config.structural_similarity_threshold == 0.95
        assert config.major_change_threshold == 30
        assert config.empty_core_is_structural is True
        assert config.similarity_strategy == "unigram"
        assert config.hash_bits == 64
        assert config.minor_change_threshold == 5

    @pytest.mark.parametrize("name,value", [
        ("POLICYWATCH_MAJOR_CHANGE_THRESHOLD", "many"),
        ("POLICYWATCH_EMPTY_CORE_IS_STRUCTURAL", "maybe"),
        ("POLICYWATCH_REAL_CHANGE_SIMILARITY_CUTOFF", "high"),
    ])
    def test_unparseable_value(self, name, value):
        with pytest.raises(ValueError, match=name):
            EngineConfig.from_env({name: value})

    def test_patterns_file(self, tmp_path):
        path = tmp_path / "site.json"
        path.write_text(json.dumps({"name": "site", "navigation": ["seller hub"]}))

        config = EngineConfig.from_env({"POLICYWATCH_PATTERNS_FILE": str(path)})

        assert config.patterns.name == "site"
        assert config.patterns.navigation[-1].pattern == "seller hub"

    def test_missing_patterns_file(self, tmp_path):
        with pytest.raises(OSError):
            EngineConfig.from_env({"POLICYWATCH_PATTERNS_FILE": str(tmp_path / "missing.json")})


class TestLoadEnv:

    def test_dotenv_does_not_override(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text("POLICYWATCH_HASH_BITS=64\nPOLICYWATCH_MIN_SENTENCE_LENGTH=10\n")
        monkeypatch.setenv("POLICYWATCH_HASH_BITS", "32")
        monkeypatch.delenv("POLICYWATCH_MIN_SENTENCE_LENGTH", raising=False)

        load_env(env_file)

        assert os.environ["POLICYWATCH_HASH_BITS"] == "32"
        assert os.environ["POLICYWATCH_MIN_SENTENCE_LENGTH"] == "10"
        monkeypatch.delenv("POLICYWATCH_MIN_SENTENCE_LENGTH")

    def test_missing_file_is_ignored(self, tmp_path):
        load_env(tmp_path / ".env")
