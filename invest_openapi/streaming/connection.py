"""
WebSocket connection management for the market-data stream.

Handles the authorised handshake, failure classification, proxy configuration,
serialized writes, and ping/pong keep-alive.
"""

import asyncio
import errno
import os
from typing import Any, Dict, Optional, Union
from urllib.parse import unquote, urlparse
from urllib.request import proxy_bypass_environment

import aiohttp

from invest_openapi.base_models import STREAMING_API_URL

from .exceptions import (
    StreamingConnectError,
    StreamingForbiddenError,
    StreamingReadError,
    StreamingSendError,
    StreamingUnauthorizedError,
)

PROXY_ENV_VARS = ("HTTPS_PROXY", "HTTP_PROXY", "ALL_PROXY", "https_proxy", "http_proxy", "all_proxy")


class KeepAliveResponder:
    """Answers server pings with a pong carrying the same payload."""

    # Send failures that leave the connection usable
    TRANSIENT_ERRNOS = frozenset(
        {errno.EAGAIN, errno.EWOULDBLOCK, errno.EINTR, errno.ENOBUFS, errno.ETIMEDOUT}
    )

    def __init__(
        self,
        ws: aiohttp.ClientWebSocketResponse,
        write_lock: asyncio.Lock,
        timeout: float = 1.0,
        logger: Optional[Any] = None,
    ):
        """
        Initialize keep-alive responder.

        Args:
            ws: WebSocket connection to answer on
            write_lock: Lock shared with every other writer on the connection
            timeout: Deadline in seconds for the pong to be written
            logger: Logger instance
        """
        self.ws = ws
        self.write_lock = write_lock
        self.timeout = timeout
        self.logger = logger

    def set_logger(self, logger):
        """Set the logger instance."""
        self.logger = logger

    def _log(self, message: str, level: str = "INFO"):
        if self.logger and hasattr(self.logger, 'log'):
            self.logger.log(message, level)

    async def _send_pong(self, payload: bytes) -> None:
        async with self.write_lock:
            await self.ws.pong(payload)

    async def respond(self, payload: bytes) -> None:
        """
        Reply to a ping within the deadline.

        Raises:
            StreamingSendError: The pong failed for a reason other than a close
                in progress or a transient network condition
        """
        if self.ws.closed:
            self._log("[STREAMING] Skipping pong, close already in progress", "DEBUG")
            return

        try:
            await asyncio.wait_for(self._send_pong(payload), timeout=self.timeout)
        except asyncio.TimeoutError:
            self._log(f"[STREAMING] Pong not written within {self.timeout:.1f}s", "DEBUG")
        except ConnectionResetError as exc:
            # aiohttp raises this when writing to a closing transport
            self._log(f"[STREAMING] Skipping pong, connection closing: {exc}", "DEBUG")
        except OSError as exc:
            if exc.errno in self.TRANSIENT_ERRNOS:
                self._log(f"[STREAMING] Transient error sending pong: {exc}", "DEBUG")
                return
            raise StreamingSendError(f"can't send pong: {exc}") from exc
        except (aiohttp.ClientError, RuntimeError) as exc:
            raise StreamingSendError(f"can't send pong: {exc}") from exc


class StreamingConnection:
    """Owns the single websocket used for subscriptions and events."""

    HANDSHAKE_TIMEOUT = 5.0
    PONG_TIMEOUT = 1.0

    def __init__(
        self,
        token: str,
        ws_url: str = STREAMING_API_URL,
        *,
        session: Optional[aiohttp.ClientSession] = None,
        handshake_timeout: float = HANDSHAKE_TIMEOUT,
        pong_timeout: float = PONG_TIMEOUT,
        logger: Optional[Any] = None,
    ):
        """
        Initialize connection manager.

        Args:
            token: API token sent as a bearer credential
            ws_url: Streaming endpoint
            session: Optional externally managed aiohttp session
            handshake_timeout: Seconds allowed for the websocket handshake
            pong_timeout: Seconds allowed for each keep-alive reply
            logger: Logger instance
        """
        self.token = token
        self.ws_url = ws_url
        self.handshake_timeout = handshake_timeout
        self.pong_timeout = pong_timeout
        self.logger = logger

        self.ws: Optional[aiohttp.ClientWebSocketResponse] = None
        self.keepalive: Optional[KeepAliveResponder] = None
        self._session = session
        self._owns_session = session is None
        self._write_lock = asyncio.Lock()
        self._closed = False

    def set_logger(self, logger):
        """Set the logger instance."""
        self.logger = logger
        if self.keepalive:
            self.keepalive.set_logger(logger)

    def _log(self, message: str, level: str = "INFO"):
        """Log message using the logger if available."""
        if self.logger:
            if hasattr(self.logger, 'log'):
                self.logger.log(message, level)
            elif level == "ERROR" and hasattr(self.logger, 'error'):
                self.logger.error(message)
            elif level == "WARNING" and hasattr(self.logger, 'warning'):
                self.logger.warning(message)
            elif hasattr(self.logger, 'info'):
                self.logger.info(message)

    @property
    def closed(self) -> bool:
        return self._closed or self.ws is None or self.ws.closed

    async def _get_session(self) -> aiohttp.ClientSession:
        """
        Lazily initialize the aiohttp session used for the websocket.

        trust_env stays off so that only the proxy from _proxy_kwargs is used.
        """
        if self._session and not self._session.closed:
            return self._session

        timeout = aiohttp.ClientTimeout(total=None)
        self._session = aiohttp.ClientSession(timeout=timeout, trust_env=False)
        self._owns_session = True
        return self._session

    async def _close_session(self) -> None:
        """Close the session if this connection created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        if self._owns_session:
            self._session = None

    def _proxy_kwargs(self) -> Dict[str, Any]:
        """
        Proxy settings for the handshake, taken from the environment.

        Hosts listed in NO_PROXY connect directly. aiohttp only speaks to
        http(s) proxies, so SOCKS URLs are skipped.
        """
        proxy_url = next((os.environ[name] for name in PROXY_ENV_VARS if os.environ.get(name)), None)
        if not proxy_url:
            return {}

        if proxy_bypass_environment(urlparse(self.ws_url).hostname or ""):
            return {}

        proxy = urlparse(proxy_url)
        if proxy.scheme.lower() not in {"http", "https"}:
            return {}

        host = proxy.hostname or ""
        if ":" in host:
            host = f"[{host}]"
        if proxy.port:
            host = f"{host}:{proxy.port}"

        kwargs: Dict[str, Any] = {"proxy": f"{proxy.scheme}://{host}"}
        if proxy.username or proxy.password:
            # Credentials go in proxy_auth, never in the proxy URL
            kwargs["proxy_auth"] = aiohttp.BasicAuth(unquote(proxy.username or ""), unquote(proxy.password or ""))
        return kwargs

    def _classify_status(self, exc: aiohttp.ClientResponseError) -> StreamingConnectError:
        if exc.status == 403:
            return StreamingForbiddenError("invalid token", url=self.ws_url, status=403)
        if exc.status == 401:
            return StreamingUnauthorizedError("token not provided", url=self.ws_url, status=401)
        return StreamingConnectError(
            f"can't connect to {self.ws_url} {exc.status} {exc.message}".rstrip(),
            url=self.ws_url,
            status=exc.status,
        )

    async def open(self) -> aiohttp.ClientWebSocketResponse:
        """
        Perform the authorised handshake and install the keep-alive responder.

        Raises:
            StreamingForbiddenError: Server answered 403
            StreamingUnauthorizedError: Server answered 401
            StreamingConnectError: Any other handshake or transport failure
        """
        session = await self._get_session()
        proxy_kwargs = self._proxy_kwargs()
        if proxy_kwargs.get("proxy"):
            self._log(f"[STREAMING] Using HTTP proxy for websocket: {proxy_kwargs['proxy']}", "INFO")

        headers = {"Authorization": f"Bearer {self.token}"}
        try:
            ws = await asyncio.wait_for(
                session.ws_connect(self.ws_url, headers=headers, autoping=False, **proxy_kwargs),
                timeout=self.handshake_timeout,
            )
        except aiohttp.ClientResponseError as exc:
            await self._close_session()
            error = self._classify_status(exc)
            self._log(f"[STREAMING] Handshake rejected: {error}", "ERROR")
            raise error from exc
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
            await self._close_session()
            self._log(f"[STREAMING] Failed to connect to {self.ws_url}: {exc!r}", "ERROR")
            raise StreamingConnectError(
                f"can't connect to {self.ws_url}: {exc!r}", url=self.ws_url
            ) from exc

        self.keepalive = KeepAliveResponder(
            ws, self._write_lock, timeout=self.pong_timeout, logger=self.logger
        )
        self.ws = ws
        self._closed = False
        self._log(f"[STREAMING] 🔗 Connected to {self.ws_url}", "INFO")
        return ws

    async def send_text(self, data: str) -> None:
        """
        Write one text frame.

        Raises:
            StreamingSendError: Connection is closed or the write failed
        """
        if self.closed:
            raise StreamingSendError("can't send frame: connection is closed")

        async with self._write_lock:
            try:
                await self.ws.send_str(data)
            except (aiohttp.ClientError, OSError, RuntimeError) as exc:
                raise StreamingSendError(f"can't send frame: {exc}") from exc

    async def receive_frame(self) -> Union[str, bytes]:
        """
        Block until the next data frame arrives.

        Ping frames are answered by the keep-alive responder and never returned.

        Raises:
            StreamingReadError: Connection closed, errored, or the keep-alive
                reply failed
        """
        if self.ws is None:
            raise StreamingReadError("can't read message: connection is not open")

        while True:
            try:
                msg = await self.ws.receive()
            except (aiohttp.ClientError, asyncio.TimeoutError, OSError, RuntimeError) as exc:
                raise StreamingReadError(f"can't read message: {exc!r}") from exc

            if msg.type == aiohttp.WSMsgType.TEXT:
                return msg.data
            if msg.type == aiohttp.WSMsgType.BINARY:
                return msg.data
            if msg.type == aiohttp.WSMsgType.PING:
                try:
                    await self.keepalive.respond(msg.data)
                except StreamingSendError as exc:
                    raise StreamingReadError("can't read message: keep-alive reply failed") from exc
                continue
            if msg.type == aiohttp.WSMsgType.PONG:
                continue
            if msg.type == aiohttp.WSMsgType.ERROR:
                raise StreamingReadError(f"can't read message: {msg.data!r}")

            # CLOSE, CLOSING, CLOSED
            raise StreamingReadError(
                f"can't read message: connection closed "
                f"(code={self.ws.close_code}, type={msg.type.name})"
            )

    async def close(self) -> None:
        """Close the websocket and the owned session. Later calls do nothing."""
        if self._closed:
            return
        self._closed = True

        try:
            if self.ws is not None and not self.ws.closed:
                await self.ws.close()
        finally:
            await self._close_session()
        self._log("[STREAMING] Connection closed", "INFO")
