"""
Tests for wire messages and handshake states
============================================
"""

import pytest

from framelink import ChannelMessage, HandshakeMessage, HandshakeState, MalformedMessage
from framelink import wire


class TestHandshakeState:

    def test_reply_states(self):
        """SYN is answered with SYN+ACK, SYN+ACK with ACK, ACK with nothing."""
        assert HandshakeState.SYN.reply_state is HandshakeState.SYN_ACK
        assert HandshakeState.SYN_ACK.reply_state is HandshakeState.ACK
        assert HandshakeState.ACK.reply_state is None
        assert HandshakeState.FIN.reply_state is None

    def test_fin_is_terminal(self):
        assert HandshakeState.ACK.advance() is HandshakeState.FIN
        assert HandshakeState.FIN.advance() is None
        assert not HandshakeState.FIN.on_wire

    def test_reply_increments_frame(self):
        msg = HandshakeMessage(token="t1", source="A", state=HandshakeState.SYN_ACK, frame=2)
        assert msg.reply("B") == HandshakeMessage(token="t1", source="B",
                                                  state=HandshakeState.ACK, frame=3)
        assert HandshakeMessage("t1", "A", HandshakeState.ACK, 3).reply("B") is None


class TestCodec:

    def test_handshake_shape(self):
        msg = HandshakeMessage(token="t1", source="A", state=HandshakeState.SYN_ACK, frame=2)
        assert wire.encode(msg) == {"token": "t1", "source": "A", "state": "SYN+ACK", "frame": 2}
        assert wire.decode(wire.encode(msg)) == msg

    def test_application_shape(self):
        assert wire.encode(ChannelMessage("t1", {"x": 1})) == {"token": "t1", "data": {"x": 1}}
        assert wire.decode({"token": "t1", "data": [1]}) == ChannelMessage("t1", [1])

    def test_application_without_data(self):
        assert wire.decode({"token": "t1"}) == ChannelMessage("t1", None)

    def test_state_presence_selects_handshake(self):
        assert wire.is_handshake({"token": "t1", "state": "ACK"})
        assert not wire.is_handshake({"token": "t1", "data": {"state": "ACK"}})
        assert not wire.is_handshake({"token": "t1", "state": ""})

    def test_fin_is_never_encoded(self):
        with pytest.raises(ValueError):
            wire.encode(HandshakeMessage("t1", "A", HandshakeState.FIN, 4))

    @pytest.mark.parametrize("payload", [
        [],
        {"token": ""},
        {"token": 7, "data": 1},
        {"token": "t1", "state": "FIN", "source": "A", "frame": 4},
        {"token": "t1", "state": "SYN", "source": "A", "frame": True},
    ])
    def test_malformed(self, payload):
        with pytest.raises(MalformedMessage):
            wire.decode(payload)
