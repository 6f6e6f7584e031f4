import pytest
import yaml

from stratsel.config import (
    DEFAULT_CONFIG_PATH,
    Config,
    SimulationConfig,
    load_config,
    save_config,
)


def test_defaults_validate():
    config = Config()
    config.validate()
    assert config.data.timeframes == ["15Min", "1Hour", "4Hour", "1day", "1week"]
    assert config.simulation.warmup_bars == 25
    assert config.simulation.cooldown == 8
    assert config.scheduler.concurrency == 2
    assert config.scheduler.round_delay == pytest.approx(1.2)


def test_packaged_defaults_match_dataclasses():
    assert DEFAULT_CONFIG_PATH.exists()
    assert load_config(DEFAULT_CONFIG_PATH).to_dict() == Config().to_dict()


def test_load_none_reads_packaged_defaults():
    assert load_config().to_dict() == Config().to_dict()


def test_partial_yaml_overrides(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({
        "log_level": "DEBUG",
        "data": {"data_dir": "/data/candles", "timeframes": ["1day"]},
        "simulation": {"cooldown": 3},
    }), encoding="utf-8")

    config = load_config(path)
    assert config.log_level == "DEBUG"
    assert config.data.data_dir == "/data/candles"
    assert config.data.timeframes == ["1day"]
    assert config.simulation.cooldown == 3
    assert config.simulation.lookback == 30
    assert config.scheduler.concurrency == 2


def test_empty_yaml_is_default(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(path).to_dict() == Config().to_dict()


def test_save_and_reload(tmp_path):
    config = Config()
    config.simulation = SimulationConfig(lock_factor=0.5)
    path = tmp_path / "nested" / "config.yaml"

    save_config(config, path)
    assert load_config(path).simulation.lock_factor == 0.5


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


@pytest.mark.parametrize("section, values", [
    ("simulation", {"risk_fraction": 0}),
    ("simulation", {"risk_fraction": 1.5}),
    ("simulation", {"lookback": 0}),
    ("simulation", {"max_holding_bars": 0}),
    ("simulation", {"stop_factor": -1}),
    ("scheduler", {"concurrency": 0}),
    ("scheduler", {"round_delay": -1}),
    ("data", {"timeframes": []}),
    ("data", {"timeframes": ["1day", "1day"]}),
])
def test_invalid_values_rejected(tmp_path, section, values):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({section: values}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


def test_validation_can_be_disabled():
    config = Config.from_dict({"validate_config": False, "scheduler": {"concurrency": 0}})
    config.validate()


def test_unknown_section_key_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("simulation:\n  bogus: 1\n", encoding="utf-8")
    with pytest.raises(ValueError, match="bogus"):
        load_config(path)


def test_unknown_top_level_key_rejected():
    with pytest.raises(ValueError, match="simulaton"):
        Config.from_dict({"simulaton": {"cooldown": 3}})


def test_section_must_be_mapping():
    with pytest.raises(ValueError, match="scheduler"):
        Config.from_dict({"scheduler": 4})


def test_malformed_yaml_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("simulation: [cooldown: 3\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid YAML"):
        load_config(path)


def test_non_mapping_yaml_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


def test_mistyped_value_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("scheduler:\n  concurrency: two\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)
