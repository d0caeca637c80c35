"""Unit tests for profile loading and env access."""

from jobboard.config import DEFAULT_PROFILE, get_env, load_profile


def test_missing_profile_gives_defaults(tmp_path):
    profile = load_profile(tmp_path / "missing.yaml")
    assert profile == DEFAULT_PROFILE
    profile["quality"]["min_score"] = 99
    assert DEFAULT_PROFILE["quality"]["min_score"] == 3


def test_profile_overrides_merge_over_defaults(tmp_path):
    path = tmp_path / "profile.yaml"
    path.write_text("candidate:\n  name: Jordan\nquality:\n  min_score: 10\n", encoding="utf-8")
    profile = load_profile(path)
    assert profile["candidate"]["name"] == "Jordan"
    assert profile["candidate"]["summary"] == DEFAULT_PROFILE["candidate"]["summary"]
    assert profile["quality"]["min_score"] == 10
    assert profile["locations"]["city"] == "london"


def test_empty_profile_file(tmp_path):
    path = tmp_path / "profile.yaml"
    path.write_text("", encoding="utf-8")
    assert load_profile(path) == DEFAULT_PROFILE


def test_get_env_strips(monkeypatch):
    monkeypatch.setenv("REED_API_KEY", "  abc \n")
    assert get_env("REED_API_KEY") == "abc"
    assert get_env("NOT_SET_ANYWHERE", "fallback") == "fallback"
