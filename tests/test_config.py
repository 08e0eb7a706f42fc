import pytest

from apiservice.config import (
    CONFIG_PATH_TEMPLATE,
    AppCacheConfig,
    Config,
    ConfigError,
    load_config,
    parse_config,
)

SAMPLE = """
app:
  name: go-api-microservice
  version: v1
  description: sample service
  author: someone
  url: http://localhost
server:
  http:
    publicAddr: ":80"
    internalAddr: ":8080"
    readTimeoutInSeconds: 5
    WriteTimeoutInSeconds: 7
    shutdownTimeoutInSeconds: 9
logger:
  debug: true
  callerSkipNo: 3
dal:
  cache:
    appCache:
      enabled: true
      defaultExpirationInSeconds: 300
      cleanupIntervalInMinutes: 10
    redis:
      enabled: false
"""


def test_parse_full_document():
    config = parse_config(SAMPLE)
    assert config.app.name == "go-api-microservice"
    assert config.app.version == "v1"
    assert config.app.author == "someone"
    assert config.server.http.public_addr == ":80"
    assert config.server.http.internal_addr == ":8080"
    assert config.server.http.read_timeout_in_seconds == 5
    assert config.server.http.write_timeout_in_seconds == 7
    assert config.server.http.shutdown_timeout_in_seconds == 9
    assert config.logger.debug is True
    assert config.logger.caller_skip_no == 3
    assert config.dal.cache.app_cache == AppCacheConfig(True, 300, 10)
    assert config.dal.cache.redis.enabled is False


def test_write_timeout_key_is_capitalised():
    config = parse_config("server:\n  http:\n    writeTimeoutInSeconds: 4\n")
    assert config.server.http.write_timeout_in_seconds == 0


def test_missing_sections_take_zero_values():
    assert parse_config("app:\n  name: svc\n") == Config(app=Config().app.__class__(name="svc"))


def test_null_section_is_zero_value():
    assert parse_config("server:\nlogger:\n") == Config()


def test_unknown_keys_are_ignored():
    assert parse_config("other: 1\napp:\n  extra: x\n") == Config()


def test_scalar_into_string_field():
    config = parse_config("app:\n  version: 2\n")
    assert config.app.version == "2"


def test_wrong_type_raises():
    with pytest.raises(ConfigError, match="readTimeoutInSeconds"):
        parse_config("server:\n  http:\n    readTimeoutInSeconds: soon\n")


def test_bool_not_accepted_for_int():
    with pytest.raises(ConfigError):
        parse_config("logger:\n  callerSkipNo: true\n")


def test_non_mapping_section_raises():
    with pytest.raises(ConfigError):
        parse_config("app: [1, 2]\n")


def test_empty_document_raises():
    with pytest.raises(ConfigError):
        parse_config("")


def test_invalid_yaml_raises():
    with pytest.raises(ConfigError):
        parse_config("app: [unclosed")


def test_load_config_reads_env_file(tmp_path):
    path = tmp_path / CONFIG_PATH_TEMPLATE.format(env="qa")
    path.parent.mkdir(parents=True)
    path.write_text(SAMPLE)
    assert load_config("qa", tmp_path) == parse_config(SAMPLE)


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config("nowhere", tmp_path)