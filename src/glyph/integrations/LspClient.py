# glyph/integrations/LspClient.py
"""LspClient.py
========================
Language-server connection of the glyph editor.

The server runs as a child process speaking JSON-RPC over stdio with
``Content-Length`` framing. A daemon reader thread decodes frames into a
bounded queue; the editor loop drains it one message per poll tick through
`try_read_message`, which never blocks.

Requests remember their method by id, so a response comes back tagged with
the method it answers (``textDocument/hover`` and so on).

A server that cannot be started leaves the client disabled: every read
returns None and every send is a no-op. A stream that breaks while the
server runs surfaces as `LspConnectionError` from `try_read_message`.
"""

import json
import logging
import os
import queue
import re
import subprocess
import sys
import threading
from dataclasses import dataclass, field
from typing import Any, Optional, Union


logger = logging.getLogger("glyph")

MAX_HEADER_SIZE = 4096
QUEUE_SIZE = 256


class LspConnectionError(ConnectionError):
    """The language-server stream broke."""


@dataclass
class LspMessage:
    """One decoded message; `method` is filled in for responses from the pending table."""

    method: Optional[str] = None
    id: Optional[int] = None
    result: Any = None
    params: Any = None
    error: Optional[dict[str, Any]] = None
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def is_response(self) -> bool:
        return "method" not in self.raw and self.id is not None


@dataclass(frozen=True)
class _StreamFailure:
    reason: str


@dataclass(frozen=True)
class _StreamClosed:
    returncode: Optional[int]


_QueueItem = Union[dict, _StreamFailure, _StreamClosed]


def utf16_column(line: str, col: int) -> int:
    """Converts a code-point column of `line` to the UTF-16 units LSP positions count."""
    return len(line[:col].encode("utf-16-le")) // 2


def encode_message(payload: dict[str, Any]) -> bytes:
    """Frames one JSON-RPC payload with its Content-Length header."""
    body = json.dumps(payload).encode("utf-8")
    header = f"Content-Length: {len(body)}\r\n\r\n"
    return header.encode("ascii") + body


def file_uri(file_name: str) -> str:
    return f"file://{os.path.abspath(file_name)}"


# ==================== LspClient Class ====================
class LspClient:
    """LspClient Class
    ====================
    Owns the language-server process, its reader thread and the message queue.

    Attributes:
        command (list[str]): Server command line, e.g. ``["pylsp"]``.
        language_id (str): ``languageId`` sent with ``didOpen``.
        enabled (bool): False when disabled by config or the server failed to start.
    """

    def __init__(self, command: list[str], language_id: str = "python", enabled: bool = True) -> None:
        self.command = list(command)
        self.language_id = language_id
        self.enabled = enabled and bool(self.command)
        self.proc: Optional[subprocess.Popen[bytes]] = None
        self.reader: Optional[threading.Thread] = None
        self.message_q: queue.Queue[_QueueItem] = queue.Queue(maxsize=QUEUE_SIZE)
        self.seq_id = 0
        self.pending: dict[int, str] = {}
        self.doc_versions: dict[str, int] = {}
        self._closed = False
        self._failure: Optional[str] = None

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "LspClient":
        lsp_cfg = config.get("lsp", {})
        command = lsp_cfg.get("command", [])
        if isinstance(command, str):
            command = command.split()
        return cls(command, str(lsp_cfg.get("language_id", "python")), bool(lsp_cfg.get("enabled", True)))

    @property
    def is_running(self) -> bool:
        return self.proc is not None and not self._closed

    # --- lifecycle -------------------------------------------------------

    def start(self) -> bool:
        """Spawns the server and sends ``initialize``/``initialized``. False when unavailable."""
        if not self.enabled:
            logger.info("LSP disabled; running without a language server.")
            return False
        try:
            preexec_fn = os.setsid if sys.platform != "win32" else None
            self.proc = subprocess.Popen(
                self.command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                bufsize=0,
                preexec_fn=preexec_fn,
            )
        except (OSError, ValueError) as exc:
            logger.warning(f"Could not start language server {self.command!r}: {exc}")
            self.enabled = False
            self.proc = None
            return False
        logger.info(f"Language server {self.command[0]} started with PID {self.proc.pid}")

        self.reader = threading.Thread(target=self._reader_loop, name="LSP-stdout", daemon=True)
        self.reader.start()
        root_uri = f"file://{os.getcwd()}"
        params = {
            "processId": os.getpid(),
            "rootUri": root_uri,
            "capabilities": {
                "textDocument": {"hover": {"contentFormat": ["plaintext", "markdown"]}},
            },
            "clientInfo": {"name": "glyph"},
            "workspaceFolders": [{"uri": root_uri, "name": "workspace"}],
        }
        self._send("initialize", params, is_request=True)
        self._send("initialized", {})
        return True

    def shutdown(self) -> None:
        if self.proc is None:
            return
        logger.info("Shutting down language server...")
        if self.proc.poll() is None:
            try:
                self._send("shutdown", is_request=True)
                self._send("exit")
                self.proc.terminate()
                self.proc.wait(timeout=2)
            except subprocess.TimeoutExpired:
                logger.warning("Language server did not exit in time; killing it.")
                self.proc.kill()
        self._closed = True
        self.proc = None
        self.reader = None

    # --- outgoing --------------------------------------------------------

    def _send(self, method: str, params: Optional[dict[str, Any]] = None, *, is_request: bool = False) -> Optional[int]:
        """Writes one message; returns the request id for requests."""
        if self.proc is None or self.proc.stdin is None or self._closed:
            return None
        payload: dict[str, Any] = {"jsonrpc": "2.0", "method": method}
        if params:
            payload["params"] = params
        request_id = None
        if is_request:
            self.seq_id += 1
            request_id = self.seq_id
            payload["id"] = request_id
            self.pending[request_id] = method
        try:
            self.proc.stdin.write(encode_message(payload))
            self.proc.stdin.flush()
        except OSError as exc:
            logger.error(f"Writing {method} to the language server failed: {exc}")
            self.pending.pop(request_id, None)
            if self._failure is None:
                self._failure = f"write failed: {exc}"
            return None
        logger.debug(f"LSP -> {method} (id={request_id})")
        return request_id

    def did_open(self, file_name: str, text: str) -> None:
        uri = file_uri(file_name)
        self.doc_versions[uri] = 1
        self._send(
            "textDocument/didOpen",
            {"textDocument": {"uri": uri, "languageId": self.language_id, "version": 1, "text": text}},
        )

    def did_change(self, file_name: str, text: str) -> None:
        uri = file_uri(file_name)
        if uri not in self.doc_versions:
            self.did_open(file_name, text)
            return
        version = self.doc_versions[uri] + 1
        self.doc_versions[uri] = version
        self._send(
            "textDocument/didChange",
            {"textDocument": {"uri": uri, "version": version}, "contentChanges": [{"text": text}]},
        )

    def request_hover(self, file_name: str, row: int, col: int) -> Optional[int]:
        """Sends ``textDocument/hover`` for the 0-indexed position. `col` counts UTF-16 units (see `utf16_column`)."""
        return self._send(
            "textDocument/hover",
            {"textDocument": {"uri": file_uri(file_name)}, "position": {"line": row, "character": col}},
            is_request=True,
        )

    # --- incoming --------------------------------------------------------

    def try_read_message(self) -> Optional[LspMessage]:
        """Returns one queued message without blocking, or None.

        Raises:
            LspConnectionError: If a write failed or the reader hit a malformed
                or failing stream.
        """
        if self._failure is not None:
            self._closed = True
            raise LspConnectionError(self._failure)
        if self.proc is None and self.message_q.empty():
            return None
        try:
            item = self.message_q.get_nowait()
        except queue.Empty:
            return None

        if isinstance(item, _StreamFailure):
            self._closed = True
            raise LspConnectionError(item.reason)
        if isinstance(item, _StreamClosed):
            logger.warning(f"Language server exited (code {item.returncode}); LSP features are off.")
            self._closed = True
            return None
        return self._to_message(item)

    def _to_message(self, raw: dict[str, Any]) -> LspMessage:
        message_id = raw.get("id")
        method = raw.get("method")
        if method is None and isinstance(message_id, int):
            method = self.pending.pop(message_id, None)
        logger.debug(f"LSP <- {method} (id={message_id})")
        return LspMessage(
            method=method,
            id=message_id,
            result=raw.get("result"),
            params=raw.get("params"),
            error=raw.get("error"),
            raw=raw,
        )

    def _reader_loop(self) -> None:
        """Reads frames from the server's stdout until it closes."""
        proc = self.proc
        stream = proc.stdout if proc else None
        if stream is None:
            return
        while True:
            try:
                item = read_frame(stream)
            except OSError as exc:
                self.message_q.put(_StreamFailure(f"read failed: {exc}"))
                return
            except ValueError as exc:
                self.message_q.put(_StreamFailure(str(exc)))
                return
            if item is None:
                self.message_q.put(_StreamClosed(proc.poll()))
                return
            try:
                self.message_q.put_nowait(item)
            except queue.Full:
                logger.warning("LSP message queue is full; dropping message.")


def read_frame(stream: Any) -> Optional[dict[str, Any]]:
    """Reads one framed message from `stream`. None on a clean EOF.

    Raises:
        ValueError: On an oversized or malformed header, a truncated body, or invalid JSON.
    """
    header = b""
    while not header.endswith(b"\r\n\r\n"):
        byte = stream.read(1)
        if not byte:
            if header:
                raise ValueError("stream closed inside a message header")
            return None
        header += byte
        if len(header) > MAX_HEADER_SIZE:
            raise ValueError("message header too large")

    match = re.search(rb"Content-Length:\s*(\d+)", header, re.IGNORECASE)
    if not match:
        raise ValueError(f"missing Content-Length in header {header[:80]!r}")
    remaining = int(match.group(1))
    body = b""
    while remaining > 0:
        chunk = stream.read(remaining)
        if not chunk:
            raise ValueError("stream closed inside a message body")
        body += chunk
        remaining -= len(chunk)

    try:
        message = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValueError(f"invalid message body ({type(exc).__name__})") from exc
    if not isinstance(message, dict):
        raise ValueError("message body is not a JSON object")
    return message
