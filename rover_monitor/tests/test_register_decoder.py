# rover_monitor/tests/test_register_decoder.py

import pytest

from rover_monitor.errors import DecodeError
from rover_monitor.services import register_decoder as regs
from rover_monitor.tests.fake_transport import (
    BATTERY_RAW,
    HISTORICAL_RAW,
    MODEL_RAW,
    PANEL_RAW,
    STATUS_RAW,
    words,
)


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------

def test_int16_words_are_signed_big_endian():
    assert regs.int16_words(words(0x0001, 0x7FFF, 0x8000, 0xFFFF), 4) == (1, 32767, -32768, -1)


@pytest.mark.parametrize("value, expected", [
    (0x19, 25),
    (0x0F, 15),
    (0x00, 0),
    (0x85, -5),
    (0x80, 0),
    (0xFF, -127),
])
def test_sign_magnitude_byte(value, expected):
    assert regs.sign_magnitude_byte(value) == expected


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------

def test_model_is_returned_untrimmed():
    model = regs.decode_model(MODEL_RAW)
    assert model.startswith("     ML2420N")
    assert len(model) == 32


def test_serial_number_combines_two_words():
    assert regs.decode_serial_number(words(0x0001, 0x0002)) == "00065538"


def test_panel_fields_in_register_order():
    panel = regs.decode_panel(PANEL_RAW)
    assert (panel.voltage, panel.current, panel.charging_power) == (182, 350, 63)
    assert panel.voltage_v == pytest.approx(18.2)
    assert panel.current_a == pytest.approx(3.5)


def test_battery_example_block():
    battery = regs.decode_battery(BATTERY_RAW)
    assert battery.state_of_charge == 50
    assert battery.voltage == 100
    assert battery.charging_current == 10
    assert battery.controller_temperature == 25
    assert battery.battery_temperature == 15


def test_battery_negative_temperatures_use_sign_bit():
    raw = bytes([0x00, 0x32, 0x00, 0x64, 0x00, 0x0A, 0x8A, 0x83])
    battery = regs.decode_battery(raw)
    assert battery.controller_temperature == -10
    assert battery.battery_temperature == -3


def test_historical_maps_named_fields_in_address_order():
    hist = regs.decode_historical(HISTORICAL_RAW)
    assert hist.battery_voltage_min_for_day == 120
    assert hist.battery_voltage_max_for_day == 138
    assert hist.max_charge_current_for_day == 512
    assert hist.max_discharge_current_for_day == 0
    assert hist.max_charge_power_for_day == 130
    assert hist.max_discharge_power_for_day == 0
    assert hist.charging_amp_hours_for_day == 42
    assert hist.discharging_amp_hours_for_day == 3
    assert hist.power_generation_for_day == 560
    assert hist.power_consumption_for_day == -1


def test_historical_field_count_matches_block_length():
    assert len(regs.decode_historical(HISTORICAL_RAW).field_names()) == regs.HISTORICAL_LENGTH


def test_controller_status_state_and_faults():
    status = regs.decode_controller_status(STATUS_RAW)
    assert status.charging_state == 2
    assert status.charging_state_name == "mppt"
    assert status.load_status == 0
    assert status.faults == ["battery_over_discharge"]


def test_unknown_charging_state_is_labelled():
    status = regs.decode_controller_status(words(0x0009, 0x0000, 0x0000))
    assert status.charging_state_name == "unknown(0x09)"
    assert status.faults == []


def test_decoding_is_deterministic():
    assert regs.decode_battery(BATTERY_RAW) == regs.decode_battery(bytes(BATTERY_RAW))
    assert regs.decode_historical(HISTORICAL_RAW) == regs.decode_historical(HISTORICAL_RAW)


# ---------------------------------------------------------------------------
# Short buffers
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("decode, raw", [
    (regs.decode_model, b""),
    (regs.decode_model, MODEL_RAW[:31]),
    (regs.decode_serial_number, b"\x00\x01"),
    (regs.decode_panel, b""),
    (regs.decode_panel, PANEL_RAW[:5]),
    (regs.decode_battery, BATTERY_RAW[:7]),
    (regs.decode_historical, HISTORICAL_RAW[:18]),
    (regs.decode_controller_status, STATUS_RAW[:4]),
])
def test_short_buffer_raises_decode_error(decode, raw):
    with pytest.raises(DecodeError):
        decode(raw)
