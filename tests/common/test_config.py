import pytest

from cooc_indicators.common.config import IndicatorConfig


def test_defaults(clean_env):
    config = IndicatorConfig.from_env()
    assert config == IndicatorConfig()
    assert config.row_cap == 200
    assert config.item_cap == 0


def test_environment_values(clean_env, monkeypatch):
    monkeypatch.setenv("COOC_ROW_CAP", "25")
    monkeypatch.setenv("COOC_ITEM_CAP", "500")
    monkeypatch.setenv("COOC_SEED", "7")
    monkeypatch.setenv("COOC_MIN_SCORE", "1.5")

    config = IndicatorConfig.from_env()
    assert (config.row_cap, config.item_cap, config.seed, config.min_score) == (25, 500, 7, 1.5)


def test_env_file_does_not_override_process_env(clean_env, monkeypatch):
    env_file = clean_env / "settings.env"
    env_file.write_text("COOC_ROW_CAP=10\nCOOC_TOP_K=3\n", encoding="utf-8")
    monkeypatch.setenv("COOC_ROW_CAP", "99")

    config = IndicatorConfig.from_env(env_file)
    assert config.row_cap == 99
    assert config.top_k == 3


def test_invalid_integer(clean_env, monkeypatch):
    monkeypatch.setenv("COOC_ITEM_CAP", "many")
    with pytest.raises(ValueError, match="COOC_ITEM_CAP"):
        IndicatorConfig.from_env()


def test_overrides_skip_none():
    config = IndicatorConfig(row_cap=50).with_overrides(row_cap=None, item_cap=10, seed=3)
    assert config.row_cap == 50
    assert config.item_cap == 10
    assert config.seed == 3
