import pytest

from rover_monitor.config import Config, ConnectionConfig, apply_overrides
from rover_monitor.errors import ConfigError

CONF = """
[rover]
port = /dev/ttyUSB1
baudrate = 19200
modbus_id = 0x10
timeout_ms = 2000   # slow adapter
trace_error = true

[polling]
interval = 30
include_status = yes

[healthchecks]
enabled = true
ping_url = https://hc-ping.test/abc

[upload]
enabled = true
url = https://collector.test/readings
token = secret

[logging]
console_level = WARNING
debug_modules = rover.transport, pymodbus
"""


def _write(tmp_path, text):
    conf_path = tmp_path / "rover.conf"
    conf_path.write_text(text)
    return str(conf_path)


def test_full_config(tmp_path):
    cfg = Config.load(_write(tmp_path, CONF))

    assert cfg.connection.port == "/dev/ttyUSB1"
    assert cfg.connection.baudrate == 19200
    assert cfg.connection.modbus_id == 16
    assert cfg.connection.timeout_ms == 2000
    assert cfg.connection.trace is False
    assert cfg.connection.trace_error is True
    assert cfg.polling.interval == 30
    assert cfg.polling.include_status is True
    assert cfg.healthchecks.enabled
    assert cfg.upload.token == "secret"
    assert cfg.logging.debug_modules == ["rover.transport", "pymodbus"]


def test_defaults_without_file():
    cfg = Config.load(None)

    assert cfg.connection == ConnectionConfig(port=None)
    assert cfg.connection.baudrate == 9600
    assert cfg.connection.modbus_id == 1
    assert cfg.connection.timeout_ms == 1000
    assert cfg.polling.interval == 60
    assert cfg.polling.supported_model == "ML2420N"


def test_explicit_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        Config.load(str(tmp_path / "absent.conf"))


def test_bad_integer_is_config_error(tmp_path):
    with pytest.raises(ConfigError):
        Config.load(_write(tmp_path, "[rover]\nbaudrate = fast\n"))


def test_missing_port_after_overrides_is_config_error():
    with pytest.raises(ConfigError):
        apply_overrides(Config.load(None), env={})


def test_environment_supplies_port_and_interval():
    cfg = apply_overrides(
        Config.load(None),
        env={"RENOGY_ROVER_PORT": "/dev/ttyS0", "RENOGY_ROVER_INTERVAL": "15"},
    )
    assert cfg.connection.port == "/dev/ttyS0"
    assert cfg.polling.interval == 15


def test_cli_beats_environment_beats_file(tmp_path):
    file_cfg = Config.load(_write(tmp_path, CONF))
    env = {"RENOGY_ROVER_PORT": "/dev/ttyS0", "RENOGY_ROVER_INTERVAL": "15"}

    from_env = apply_overrides(file_cfg, env=env)
    assert from_env.connection.port == "/dev/ttyS0"
    assert from_env.polling.interval == 15

    from_cli = apply_overrides(file_cfg, env=env, port="/dev/ttyACM0", interval=5, trace=True)
    assert from_cli.connection.port == "/dev/ttyACM0"
    assert from_cli.polling.interval == 5
    assert from_cli.connection.trace is True


def test_non_positive_interval_rejected():
    with pytest.raises(ConfigError):
        apply_overrides(Config.load(None), env={"RENOGY_ROVER_PORT": "/dev/ttyS0"}, interval=0)


@pytest.mark.parametrize("kwargs", [
    {"baudrate": 0},
    {"modbus_id": 0},
    {"modbus_id": 248},
    {"timeout_ms": -1},
])
def test_connection_validation(kwargs):
    with pytest.raises(ConfigError):
        ConnectionConfig(port="/dev/ttyUSB0", **kwargs).validate()


def test_connection_config_is_immutable():
    cfg = ConnectionConfig(port="/dev/ttyUSB0")
    with pytest.raises(AttributeError):
        cfg.port = "/dev/ttyUSB1"


def test_bad_upload_timeout_is_config_error(tmp_path):
    with pytest.raises(ConfigError):
        Config.load(_write(tmp_path, "[upload]\ntimeout = soon\n"))


def test_upload_timeout_parsed_as_float(tmp_path):
    cfg = Config.load(_write(tmp_path, "[upload]\ntimeout = 2.5\n"))
    assert cfg.upload.timeout == 2.5
