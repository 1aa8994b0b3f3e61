from pathlib import Path

import pytest

from shop_finsight.config import default_app_config, load_app_config


def write_config(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "shop_finsight_config.toml"
    path.write_text(content, encoding="utf-8")
    return path


def test_load_full_config_resolves_paths_relative_to_file(tmp_path):
    path = write_config(
        tmp_path,
        """
[business]
name = "Sharp Cuts"
currency = "eur"

[database]
engine = "sqlite"
path = "db/shop.sqlite"

[reports]
default_range = "thisMonth"
high_value_threshold = 80
inactive_days = 45
low_performance_threshold = 60.5

[display]
mode = "both"
decimals = 1
output_dir = "exports"

[logging]
level = "debug"
""",
    )

    config = load_app_config(str(path))

    assert config.business_name == "Sharp Cuts"
    assert config.currency == "EUR"
    assert config.database.engine == "sqlite"
    assert config.database.path == (tmp_path / "db" / "shop.sqlite").resolve()
    assert config.reports.default_range == "thisMonth"
    assert config.reports.high_value_threshold == 80.0
    assert config.reports.inactive_days == 45
    assert config.reports.low_performance_threshold == 60.5
    assert config.display_mode == "both"
    assert config.decimals == 1
    assert config.output_dir == (tmp_path / "exports").resolve()
    assert config.log_level == "DEBUG"


def test_empty_config_uses_defaults(tmp_path):
    path = write_config(tmp_path, "")

    config = load_app_config(str(path))

    assert config == default_app_config(tmp_path)
    assert config.reports.high_value_threshold == 100.0
    assert config.reports.inactive_days == 30
    assert config.reports.default_range is None
    assert config.database.path.name == "shop_finsight.sqlite"


def test_missing_default_config_falls_back_to_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    config = load_app_config()

    assert config.business_name == "My Business"
    assert config.database.path == (tmp_path / "data/db/shop_finsight.sqlite").resolve()


def test_missing_explicit_config_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_app_config(str(tmp_path / "nope.toml"))


def test_malformed_toml_raises_value_error(tmp_path):
    path = write_config(tmp_path, "[business\nname = 1")

    with pytest.raises(ValueError, match="Failed to parse TOML"):
        load_app_config(str(path))


@pytest.mark.parametrize(
    "content, message",
    [
        ('[business]\ncurrency = "XYZ"\n', "Unsupported currency"),
        ('[reports]\ndefault_range = "yesterday"\n', "default_range"),
        ('[reports]\ninactive_days = "soon"\n', "inactive_days"),
        ("[reports]\nhigh_value_threshold = -1\n", "high_value_threshold"),
        ('[display]\nmode = "pdf"\n', "display.mode"),
        ('[logging]\nlevel = "LOUD"\n', "logging.level"),
    ],
)
def test_invalid_values_raise_value_error(tmp_path, content, message):
    path = write_config(tmp_path, content)

    with pytest.raises(ValueError, match=message):
        load_app_config(str(path))
