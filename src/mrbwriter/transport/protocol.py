"""mruby/c writer line protocol.

The board firmware exposes a small command interpreter on its serial line.
Every command is a CRLF-terminated line answered by a status line:

    ``+OK ...``    command accepted
    ``+DONE``      binary payload fully received
    ``-ERR ...``   command rejected

A program is flashed with::

    <CRLF>            -> +OK mruby/c ...   (repeated until the banner appears)
    clear             -> +OK
    write <size>      -> +OK
    <size raw bytes>  -> +DONE
    execute           -> +OK

Lines that carry no status prefix (echo, boot chatter) are skipped.
"""

from __future__ import annotations

import asyncio
from typing import Protocol

from mrbwriter.exceptions import ProtocolError, ProtocolTimeoutError
from mrbwriter.models.target import TargetProfile
from mrbwriter.utils.logging import get_logger

logger = get_logger(__name__)

OK_PREFIX = "+OK"
DONE_PREFIX = "+DONE"
ERROR_PREFIX = "-ERR"

ATTENTION_ATTEMPTS = 5
ATTENTION_TIMEOUT = 1.0


class LineChannel(Protocol):
    """Byte sink plus line source used by the handshake."""

    async def write(self, data: bytes) -> None: ...

    async def read_line(self, timeout: float) -> str:
        """Return the next received line; raise asyncio.TimeoutError on timeout."""
        ...


async def expect_response(channel: LineChannel, prefix: str, timeout: float) -> str:
    """Read lines until one starts with *prefix*.

    Raises:
        ProtocolError: If the device answers ``-ERR``.
        ProtocolTimeoutError: If no matching line arrives within *timeout*.
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while True:
        remaining = deadline - loop.time()
        if remaining <= 0:
            raise ProtocolTimeoutError(f"Timed out waiting for {prefix}")
        try:
            line = (await channel.read_line(remaining)).strip()
        except asyncio.TimeoutError as exc:
            raise ProtocolTimeoutError(f"Timed out waiting for {prefix}") from exc
        if line.startswith(ERROR_PREFIX):
            raise ProtocolError(f"Device rejected command: {line}")
        if line.startswith(prefix):
            return line
        logger.debug("writer_protocol_skip", line=line)


async def send_line(channel: LineChannel, text: str, profile: TargetProfile) -> None:
    await channel.write((text + profile.line_ending).encode("utf-8"))


async def command(channel: LineChannel, text: str, profile: TargetProfile) -> str:
    """Send one command line and wait for ``+OK``."""
    logger.debug("writer_command", command=text)
    await send_line(channel, text, profile)
    return await expect_response(channel, OK_PREFIX, profile.response_timeout)


async def enter_command_mode(
    channel: LineChannel,
    attempts: int = ATTENTION_ATTEMPTS,
    timeout: float = ATTENTION_TIMEOUT,
    line_ending: str = "\r\n",
) -> str:
    """Poke the board with empty lines until it prints its ``+OK`` banner."""
    for attempt in range(1, attempts + 1):
        await channel.write(line_ending.encode("utf-8"))
        try:
            banner = await expect_response(channel, OK_PREFIX, timeout)
        except ProtocolTimeoutError:
            logger.debug("writer_attention_retry", attempt=attempt)
            continue
        logger.info("writer_command_mode", banner=banner)
        return banner
    raise ProtocolTimeoutError(
        f"Board did not enter command mode after {attempts} attempts"
    )


async def write_program(channel: LineChannel, binary: bytes, profile: TargetProfile) -> None:
    """Flash *binary* and start it.

    Raises:
        ProtocolError: On any rejected command or missing response.
    """
    await enter_command_mode(channel, line_ending=profile.line_ending)
    await command(channel, "clear", profile)
    await command(channel, f"write {len(binary)}", profile)
    await channel.write(binary)
    await expect_response(channel, DONE_PREFIX, profile.response_timeout)
    await command(channel, "execute", profile)
    logger.info("writer_program_written", size=len(binary), target=profile.target.value)
