"""Unit tests for the mruby/c writer handshake over a scripted channel."""

from __future__ import annotations

import asyncio

import pytest

from mrbwriter.exceptions import ProtocolError, ProtocolTimeoutError
from mrbwriter.models.target import Target, profile_for
from mrbwriter.transport.protocol import (
    enter_command_mode,
    expect_response,
    write_program,
)


class ScriptedChannel:
    """Answers each write with the next scripted batch of lines."""

    def __init__(self, replies: list[list[str]]) -> None:
        self.replies = list(replies)
        self.writes: list[bytes] = []
        self._pending: list[str] = []

    async def write(self, data: bytes) -> None:
        self.writes.append(data)
        if self.replies:
            self._pending.extend(self.replies.pop(0))

    async def read_line(self, timeout: float) -> str:
        if not self._pending:
            raise asyncio.TimeoutError
        return self._pending.pop(0)


class TestExpectResponse:
    def test_skips_noise(self):
        channel = ScriptedChannel([])
        channel._pending = ["echo", "", "+OK"]

        line = asyncio.run(expect_response(channel, "+OK", 1.0))

        assert line == "+OK"

    def test_error_line_raises(self):
        channel = ScriptedChannel([])
        channel._pending = ["-ERR unknown command"]

        with pytest.raises(ProtocolError, match="unknown command"):
            asyncio.run(expect_response(channel, "+OK", 1.0))

    def test_timeout(self):
        with pytest.raises(ProtocolTimeoutError):
            asyncio.run(expect_response(ScriptedChannel([]), "+OK", 1.0))


class TestEnterCommandMode:
    def test_retries_until_banner(self):
        channel = ScriptedChannel([[], ["booting..."], ["+OK mruby/c v2"]])

        banner = asyncio.run(enter_command_mode(channel, attempts=5, timeout=1.0))

        assert banner == "+OK mruby/c v2"
        assert channel.writes == [b"\r\n"] * 3

    def test_gives_up(self):
        channel = ScriptedChannel([])

        with pytest.raises(ProtocolTimeoutError, match="after 2 attempts"):
            asyncio.run(enter_command_mode(channel, attempts=2, timeout=0.5))
        assert len(channel.writes) == 2


class TestWriteProgram:
    def test_full_handshake(self):
        channel = ScriptedChannel([
            ["+OK mruby/c"],    # attention
            ["+OK"],            # clear
            ["+OK"],            # write 3
            ["+DONE"],          # payload
            ["+OK"],            # execute
        ])

        asyncio.run(write_program(channel, b"\x01\x02\x03", profile_for(Target.RBOARD)))

        assert channel.writes == [
            b"\r\n",
            b"clear\r\n",
            b"write 3\r\n",
            b"\x01\x02\x03",
            b"execute\r\n",
        ]

    def test_rejected_write_aborts(self):
        channel = ScriptedChannel([
            ["+OK mruby/c"],
            ["+OK"],
            ["-ERR program too large"],
        ])

        with pytest.raises(ProtocolError, match="too large"):
            asyncio.run(write_program(channel, b"\x00" * 10, profile_for(Target.ESP32)))
        assert b"execute\r\n" not in channel.writes
