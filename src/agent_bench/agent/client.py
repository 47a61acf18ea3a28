"""Zabbix agent passive check client."""

import logging
import socket
import struct
import zlib

from agent_bench.errors import AgentError

logger = logging.getLogger(__name__)

HEADER_MAGIC = b"ZBXD"
FLAG_PROTOCOL = 0x01
FLAG_COMPRESSED = 0x02
FLAG_LARGE = 0x04

NOT_SUPPORTED = "ZBX_NOTSUPPORTED"
AGENT_ERROR = "ZBX_ERROR"

_RECV_CHUNK = 4096


def encode_request(key: str) -> bytes:
    """Frame an item key as a passive check request."""
    payload = key.encode("utf-8")
    return HEADER_MAGIC + bytes([FLAG_PROTOCOL]) + struct.pack("<Q", len(payload)) + payload


def decode_response(data: bytes) -> str:
    """Unframe an agent response and return its value.

    Raises AgentError for malformed frames and agent-reported errors.
    """
    if not data.startswith(HEADER_MAGIC):
        # Pre-1.4 agents answer without a header
        return _check_value(data.decode("utf-8", errors="replace"))
    if len(data) < 13:
        raise AgentError("truncated response header")

    flags = data[4]
    if flags & FLAG_LARGE:
        raise AgentError("large packets are not supported")
    if flags & FLAG_COMPRESSED:
        datalen, reserved = struct.unpack("<II", data[5:13])
        try:
            body = zlib.decompress(data[13 : 13 + datalen])
        except zlib.error as exc:
            raise AgentError(f"cannot decompress response: {exc}") from exc
        if len(body) != reserved:
            raise AgentError(
                f"decompressed {len(body)} bytes, expected {reserved}"
            )
    else:
        (datalen,) = struct.unpack("<Q", data[5:13])
        body = data[13 : 13 + datalen]
        if len(body) != datalen:
            raise AgentError(f"expected {datalen} bytes, received {len(body)}")

    return _check_value(body.decode("utf-8", errors="replace"))


def _check_value(value: str) -> str:
    for marker in (NOT_SUPPORTED, AGENT_ERROR):
        if value.startswith(marker):
            _, _, reason = value.partition("\0")
            raise AgentError(reason.rstrip("\0") or marker)
    return value


def _expected_length(buf: bytes) -> int | None:
    """Total frame length once the header is buffered, else None."""
    if len(buf) < 13 or not buf.startswith(HEADER_MAGIC):
        return None
    if buf[4] & FLAG_COMPRESSED:
        (datalen,) = struct.unpack("<I", buf[5:9])
    else:
        (datalen,) = struct.unpack("<Q", buf[5:13])
    return 13 + datalen


class ZabbixAgentClient:
    """Issues one TCP connection per query against a Zabbix agent."""

    def __init__(self, host: str = "localhost", port: int = 10050) -> None:
        self._host = host
        self._port = port

    @property
    def address(self) -> str:
        return f"{self._host}:{self._port}"

    def query(self, key: str, timeout: float) -> str:
        """Get the value of ``key`` from the agent."""
        try:
            with socket.create_connection((self._host, self._port), timeout=timeout) as sock:
                sock.settimeout(timeout)
                sock.sendall(encode_request(key))
                data = self._receive(sock)
        except TimeoutError as exc:
            raise AgentError(f"timeout after {timeout:.3f}s") from exc
        except OSError as exc:
            raise AgentError(str(exc) or exc.__class__.__name__) from exc

        if not data:
            raise AgentError("connection closed by agent without a response")
        logger.debug("%s %s: %d bytes", self.address, key, len(data))
        return decode_response(data)

    def _receive(self, sock: socket.socket) -> bytes:
        buf = b""
        while True:
            expected = _expected_length(buf)
            if expected is not None and len(buf) >= expected:
                return buf
            chunk = sock.recv(_RECV_CHUNK)
            if not chunk:
                return buf
            buf += chunk
