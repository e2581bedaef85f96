"""
Unit tests for the websocket commands, message normalization and entity lookup.
"""

import asyncio
from unittest.mock import ANY, AsyncMock, Mock

from homeassistant.components import websocket_api
from homeassistant.exceptions import HomeAssistantError

from custom_components.voltas_ir_climate.const import DOMAIN, WS_TYPE_AC_CONTROL, WS_TYPE_STATUS
from custom_components.voltas_ir_climate.websocket_api import (
    request_from_message,
    resolve_entity,
    websocket_ac_control,
    websocket_status,
)
from custom_components.voltas_ir_climate.climate_protocols.voltas import (
    OFF_SIGNAL,
    AcCommandRequest,
    FanSpeed,
    Mode,
    Power,
    encode_signal,
)


def _hass(entities):
    hass = Mock()
    hass.data = {DOMAIN: entities}
    return hass


class TestRequestFromMessage:

    def test_full_message(self):
        msg = {"id": 1, "type": "voltas_ir_climate/ac_control",
               "power": "on", "mode": "Cool", "temp": 24, "fan": "low"}
        assert request_from_message(msg) == AcCommandRequest(Power.ON, Mode.COOL, 24, FanSpeed.LOW)

    def test_missing_fan_is_default(self):
        request = request_from_message({"power": "ON", "mode": "COOL", "temp": 24})
        assert request.fan_speed is FanSpeed.DEFAULT
        assert encode_signal(request)[1:3] == bytes([0x28, 0x88])

    def test_empty_message_is_off(self):
        assert encode_signal(request_from_message({}))[9] == 0xA2

    def test_malformed_values(self):
        request = request_from_message({"power": 1, "mode": None, "temp": "abc", "fan": 5})
        assert request == AcCommandRequest(Power.OFF, Mode.UNKNOWN, 0, FanSpeed.DEFAULT)

    def test_string_temperature(self):
        assert request_from_message({"power": "ON", "mode": "HEAT", "temp": "19"}).target_temp == 19

    def test_missing_temperature_clamps_to_minimum(self):
        signal = encode_signal(request_from_message({"power": "ON", "mode": "COOL"}))
        assert signal[3] == 16
        assert signal == encode_signal(AcCommandRequest(Power.ON, Mode.COOL, 16, FanSpeed.DEFAULT))

    def test_unreadable_temperature_clamps_to_minimum(self):
        assert encode_signal(request_from_message({"power": "ON", "mode": "HEAT", "temp": "warm"}))[3] == 16


class TestMessageSchema:

    def test_object_and_array_values_are_accepted(self):
        msg = websocket_ac_control._ws_schema({
            "id": 1, "type": WS_TYPE_AC_CONTROL,
            "power": [1], "mode": {"name": "COOL"}, "temp": {"v": 24},
        })
        assert msg["fan"] == "NONE"
        assert request_from_message(msg) == AcCommandRequest(Power.OFF, Mode.UNKNOWN, 0, FanSpeed.DEFAULT)

    def test_object_values_encode_without_error(self):
        msg = websocket_ac_control._ws_schema({
            "id": 2, "type": WS_TYPE_AC_CONTROL,
            "power": "ON", "mode": "HEAT", "temp": [30], "fan": {"speed": "LOW"},
        })
        signal = encode_signal(request_from_message(msg))
        assert signal[1] == 0x22
        assert signal[3] == 16


class TestAcControlCommand:
    """The ac_control handler, with the connection and entity mocked."""

    def _run(self, hass, msg):
        connection = Mock()
        asyncio.run(websocket_ac_control.__wrapped__(hass, connection, msg))
        return connection

    def test_sends_signal_and_bytes(self):
        request = AcCommandRequest(Power.ON, Mode.COOL, 24, FanSpeed.LOW)
        entity = Mock()
        entity.async_send_request = AsyncMock(return_value=encode_signal(request))
        msg = {"id": 1, "type": WS_TYPE_AC_CONTROL, "power": "ON", "mode": "COOL", "temp": 24, "fan": "LOW"}

        connection = self._run(_hass({"e1": entity}), msg)

        entity.async_send_request.assert_awaited_once_with(request)
        connection.send_result.assert_called_once_with(1, {
            "signal": "{0x33, 0x88, 0x80, 0x18, 0x3B, 0x3B, 0x3B, 0x11, 0x20, 0xCA}",
            "bytes": [0x33, 0x88, 0x80, 0x18, 0x3B, 0x3B, 0x3B, 0x11, 0x20, 0xCA],
        })
        connection.send_error.assert_not_called()

    def test_routes_by_entry_id(self):
        first, second = Mock(), Mock()
        second.async_send_request = AsyncMock(return_value=OFF_SIGNAL)

        connection = self._run(_hass({"a": first, "b": second}),
                               {"id": 4, "type": WS_TYPE_AC_CONTROL, "entry_id": "b", "power": "OFF"})

        second.async_send_request.assert_awaited_once()
        connection.send_result.assert_called_once_with(4, {
            "signal": "{0x33, 0x28, 0x08, 0x18, 0x3B, 0x3B, 0x3B, 0x11, 0x20, 0xA2}",
            "bytes": list(OFF_SIGNAL),
        })

    def test_no_entity(self):
        connection = self._run(_hass({}), {"id": 2, "type": WS_TYPE_AC_CONTROL, "power": "ON"})
        connection.send_error.assert_called_once_with(2, websocket_api.ERR_NOT_FOUND, ANY)
        connection.send_result.assert_not_called()

    def test_transmit_failure(self):
        entity = Mock()
        entity.async_send_request = AsyncMock(side_effect=HomeAssistantError("device offline"))

        connection = self._run(_hass({"e1": entity}), {"id": 3, "type": WS_TYPE_AC_CONTROL, "power": "ON"})

        connection.send_error.assert_called_once_with(3, websocket_api.ERR_HOME_ASSISTANT_ERROR, "device offline")
        connection.send_result.assert_not_called()


class TestStatusCommand:

    def test_sends_entity_status(self):
        status = {"room_temperature": 27.5, "room_humidity": 55, "power": "ON"}
        entity = Mock()
        entity.status.return_value = status
        connection = Mock()

        websocket_status(_hass({"e1": entity}), connection, {"id": 5, "type": WS_TYPE_STATUS})

        connection.send_result.assert_called_once_with(5, status)

    def test_no_entity(self):
        connection = Mock()
        websocket_status(_hass({"a": Mock(), "b": Mock()}), connection, {"id": 6, "type": WS_TYPE_STATUS})
        connection.send_error.assert_called_once_with(6, websocket_api.ERR_NOT_FOUND, ANY)


class TestResolveEntity:

    def test_single_entry(self):
        entity = Mock()
        assert resolve_entity(_hass({"abc": entity})) is entity

    def test_by_entry_id(self):
        first, second = Mock(), Mock()
        hass = _hass({"a": first, "b": second})
        assert resolve_entity(hass, "b") is second
        assert resolve_entity(hass, "c") is None

    def test_ambiguous_without_entry_id(self):
        assert resolve_entity(_hass({"a": Mock(), "b": Mock()})) is None

    def test_not_set_up(self):
        hass = Mock()
        hass.data = {}
        assert resolve_entity(hass) is None
