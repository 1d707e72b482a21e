"""Tests for the line-delimited JSON wire protocol."""

from datetime import timedelta

import pytest
from yeelink.connection.errors import MalformedMessage
from yeelink.connection.protocol import (
    Error,
    Notification,
    Result,
    decode_line,
    encode_request,
    stringify,
)
from yeelink.types import (
    CfAction,
    Effect,
    FlowExpression,
    FlowTuple,
    Mode,
    Power,
    Properties,
    Property,
)


class TestStringify:
    def test_int_is_bare(self):
        assert stringify(500) == "500"
        assert stringify(-1) == "-1"

    def test_string_is_quoted(self):
        assert stringify("bedroom") == '"bedroom"'

    def test_string_is_escaped(self):
        assert stringify('say "hi"') == '"say \\"hi\\""'

    def test_string_enum_is_quoted(self):
        assert stringify(Power.ON) == '"on"'
        assert stringify(Effect.SMOOTH) == '"smooth"'

    def test_numeric_enum_is_bare(self):
        assert stringify(Mode.NORMAL) == "0"
        assert stringify(CfAction.OFF) == "2"

    def test_timedelta_in_millis(self):
        assert stringify(timedelta(seconds=1.5)) == "1500"

    def test_flow_expression_is_one_quoted_string(self):
        expr = FlowExpression([
            FlowTuple.rgb(1000, 0xFF0000, 100),
            FlowTuple.ct(500, 2700, -1),
            FlowTuple.sleep(200),
        ])
        assert stringify(expr) == '"1000,1,16711680,100,500,2,2700,-1,200,7,0,-1"'

    def test_properties_spread_into_params(self):
        props = Properties([Property.NAME, Property.POWER])
        assert stringify(props) == '"name","power"'

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            stringify(1.5)


class TestEncodeRequest:
    def test_set_power(self):
        params = [stringify(p) for p in (Power.ON, Effect.SMOOTH, 500, Mode.NORMAL)]
        line = encode_request(1, "set_power", params)
        assert line == b'{"id":1,"method":"set_power","params":["on","smooth",500,0]}\r\n'

    def test_no_params(self):
        assert encode_request(7, "toggle", []) == b'{"id":7,"method":"toggle","params":[]}\r\n'

    def test_get_prop(self):
        line = encode_request(1, "get_prop", [stringify(Properties(["power", "bright"]))])
        assert line == b'{"id":1,"method":"get_prop","params":["power","bright"]}\r\n'


class TestDecodeLine:
    def test_result(self):
        assert decode_line(b'{"id":1,"result":["ok"]}\r\n') == Result(1, ["ok"])

    def test_result_keeps_order(self):
        msg = decode_line('{"id":3, "result":["on","50"]}')
        assert msg == Result(3, ["on", "50"])

    def test_error(self):
        msg = decode_line(b'{"id":1, "error":{"code":-1, "message":"unsupported method"}}\r\n')
        assert msg == Error(1, -1, "unsupported method")

    def test_notification(self):
        msg = decode_line(b'{"method":"props","params":{"power":"on","bright":"10"}}\r\n')
        assert isinstance(msg, Notification)
        assert msg.method == "props"
        assert msg.params == {"power": "on", "bright": "10"}

    def test_invalid_json(self):
        with pytest.raises(MalformedMessage):
            decode_line(b'{"empty"}')

    def test_invalid_utf8(self):
        with pytest.raises(MalformedMessage):
            decode_line(b"\xff\xfe\r\n")

    def test_not_an_object(self):
        with pytest.raises(MalformedMessage):
            decode_line(b'["ok"]')

    def test_unknown_shape(self):
        with pytest.raises(MalformedMessage):
            decode_line(b'{"id":1}')

    def test_notification_with_id_is_not_a_notification(self):
        with pytest.raises(MalformedMessage):
            decode_line(b'{"id":1,"method":"props","params":{}}')

    def test_result_must_be_list(self):
        with pytest.raises(MalformedMessage):
            decode_line(b'{"id":1,"result":"ok"}')

    def test_result_values_must_be_scalars(self):
        for value in ("null", "true", "{\"a\":1}", "[\"on\"]"):
            with pytest.raises(MalformedMessage):
                decode_line('{"id":1,"result":[' + value + ']}')

    def test_numeric_result_values(self):
        assert decode_line(b'{"id":2,"result":[50,"on"]}') == Result(2, ["50", "on"])

    def test_error_code_must_be_int(self):
        with pytest.raises(MalformedMessage):
            decode_line(b'{"id":1,"error":{"code":"x","message":"bad"}}')

    def test_id_must_be_int(self):
        with pytest.raises(MalformedMessage):
            decode_line(b'{"id":"1","result":["ok"]}')

    def test_malformed_keeps_line(self):
        with pytest.raises(MalformedMessage) as info:
            decode_line(b"garbage")
        assert info.value.line == b"garbage"
