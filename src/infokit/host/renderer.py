"""Socket client for the external infographic renderer process.

The renderer listens on a TCP port and accepts one JSON command per
connection. It answers with newline-delimited JSON messages: zero or more
progress events followed by a final status message::

    {"event": "progress", "current": 3, "total": 10, "currentFile": "a.jpg"}
    {"status": "success", "result": {"success": true, "generatedFiles": [...], "errors": []}}
"""

import asyncio
import json
import logging
import socket
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from ..errors import HostError
from .bridge import GenerationProgress, GenerationRequest, GenerationResult, ProgressCallback

logger = logging.getLogger("InfographicEditor.host.renderer")

RESPONSE_TIMEOUT = 600.0


@dataclass
class RendererConnection:
    host: str
    port: int
    sock: socket.socket = None

    def connect(self) -> bool:
        if self.sock:
            return True
        try:
            self.sock = socket.create_connection((self.host, self.port), timeout=10.0)
            logger.info(f"Connected to renderer at {self.host}:{self.port}")
            return True
        except OSError as e:
            logger.error(f"Failed to connect to renderer: {str(e)}")
            self.sock = None
            return False

    def disconnect(self):
        if self.sock:
            try:
                self.sock.close()
            except OSError as e:
                logger.error(f"Error disconnecting from renderer: {str(e)}")
            finally:
                self.sock = None

    def _read_messages(self, on_event: Callable[[dict], None]) -> Dict[str, Any]:
        """Read newline-delimited messages until the final status message."""
        buffer = b""
        self.sock.settimeout(RESPONSE_TIMEOUT)
        while True:
            try:
                chunk = self.sock.recv(8192)
            except socket.timeout:
                raise HostError("Timeout waiting for renderer response")
            if not chunk:
                raise HostError("Renderer closed the connection before finishing")
            buffer += chunk
            while b"\n" in buffer:
                line, buffer = buffer.split(b"\n", 1)
                if not line.strip():
                    continue
                try:
                    message = json.loads(line.decode("utf-8"))
                except json.JSONDecodeError as e:
                    raise HostError(f"Invalid response from renderer: {str(e)}")
                if "event" in message:
                    on_event(message)
                    continue
                return message

    def send_command(self, command_type: str, params: Optional[Dict[str, Any]] = None,
                     on_event: Optional[Callable[[dict], None]] = None) -> Dict[str, Any]:
        if not self.sock and not self.connect():
            raise HostError(f"Not connected to renderer at {self.host}:{self.port}")

        command = {"type": command_type, "params": params or {}}
        try:
            self.sock.sendall(json.dumps(command).encode("utf-8") + b"\n")
            response = self._read_messages(on_event or (lambda message: None))
        except (ConnectionError, BrokenPipeError, ConnectionResetError) as e:
            raise HostError(f"Connection to renderer lost: {str(e)}") from e
        finally:
            self.disconnect()

        if response.get("status") == "error":
            raise HostError(response.get("message", "Unknown error from renderer"))
        return response.get("result", {})

    def generate(self, request: GenerationRequest,
                 on_progress: Optional[ProgressCallback] = None) -> GenerationResult:
        def on_event(message: dict):
            if message.get("event") == "progress" and on_progress:
                on_progress(GenerationProgress.model_validate(message))

        result = self.send_command("generate_artifacts", request.to_payload(), on_event)
        return GenerationResult.model_validate(result)

    async def generate_async(self, request: GenerationRequest,
                             on_progress: Optional[ProgressCallback] = None) -> GenerationResult:
        """Run ``generate`` on a worker thread, delivering progress on the event loop."""
        loop = asyncio.get_running_loop()

        def threadsafe_progress(progress: GenerationProgress):
            if on_progress:
                loop.call_soon_threadsafe(on_progress, progress)

        return await asyncio.to_thread(self.generate, request, threadsafe_progress)
