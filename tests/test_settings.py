"""Tests for settings validation and defaults."""

import pytest
from pydantic import ValidationError

from codelogic.config.settings import Settings


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, GOOGLE_API_KEY="k", **overrides)


def test_defaults():
    cfg = _settings()
    assert cfg.RETRIEVAL_K == 9
    assert cfg.EMPTY_SELECTION_POLICY == "match_nothing"
    assert cfg.HISTORY_MAX_TURNS is None
    assert cfg.CATEGORY_MAP_PATH is None


def test_api_key_is_secret():
    cfg = _settings()
    assert "k" != str(cfg.GOOGLE_API_KEY)
    assert cfg.GOOGLE_API_KEY.get_secret_value() == "k"


@pytest.mark.parametrize("k", [0, 51])
def test_k_out_of_range(k):
    with pytest.raises(ValidationError, match="RETRIEVAL_K"):
        _settings(RETRIEVAL_K=k)


def test_blank_corpus_root_rejected():
    with pytest.raises(ValidationError, match="CORPUS_ROOT"):
        _settings(CORPUS_ROOT="  ")


def test_non_positive_timeout_rejected():
    with pytest.raises(ValidationError, match="REQUEST_TIMEOUT_SECONDS"):
        _settings(REQUEST_TIMEOUT_SECONDS=0)


def test_unknown_policy_rejected():
    with pytest.raises(ValidationError):
        _settings(EMPTY_SELECTION_POLICY="match_some")
