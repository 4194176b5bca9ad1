import pytest

from orderhub.core.config import Config, CONFIG_ENV_VAR, DB_ENV_VAR, get_config


@pytest.fixture(autouse=True)
def fresh_config():
    Config.reset()
    yield
    Config.reset()


def _write(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


VALID = """
general:
  data_dir: data
  database: test.db
  log_file: ""
orders:
  default_currency: USD
  sequence_width: "6"
  restock_on_cancel: "yes"
  retry_backoff: 0.1
sync:
  workers: 2
  channels: woocommerce
"""


def test_load_and_typed_getters(tmp_path):
    config = Config(str(_write(tmp_path, VALID)))

    assert config.get('orders', 'default_currency') == "USD"
    assert config.get_int('orders', 'sequence_width') == 6
    assert config.get_float('orders', 'retry_backoff') == 0.1
    assert config.get_bool('orders', 'restock_on_cancel') is True
    assert config.get_list('sync', 'channels') == ["woocommerce"]
    assert config.get('orders', 'missing', default=42) == 42
    assert config.log_path is None


def test_singleton(tmp_path):
    first = Config(str(_write(tmp_path, VALID)))
    assert get_config() is first


def test_env_var_points_at_file(tmp_path, monkeypatch):
    monkeypatch.setenv(CONFIG_ENV_VAR, str(_write(tmp_path, VALID)))
    assert get_config().get_int('sync', 'workers') == 2


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        Config(str(tmp_path / "nope.yaml"))


def test_missing_sections(tmp_path):
    with pytest.raises(ValueError, match="sync"):
        Config(str(_write(tmp_path, "general: {}\norders: {}\n")))


def test_paths_resolve_next_to_the_config_file(tmp_path, monkeypatch):
    monkeypatch.delenv(DB_ENV_VAR, raising=False)
    config = Config(str(_write(tmp_path, VALID)))
    assert config.base_dir == tmp_path.resolve()
    assert config.db_path == tmp_path.resolve() / "data" / "test.db"
    assert config.data_dir.is_dir()


def test_db_env_override(tmp_path, monkeypatch):
    monkeypatch.setenv(DB_ENV_VAR, str(tmp_path / "elsewhere.db"))
    config = Config(str(_write(tmp_path, VALID)))
    assert config.db_path == tmp_path / "elsewhere.db"
