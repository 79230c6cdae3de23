import aiohttp
import asyncio
import logging
import ssl
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)

class AsyncHTTPClient:
    """Short-lived aiohttp session for JSON calls to external APIs.

    Every Flask request runs on its own event loop, so the session is opened
    in ``start()`` and must be closed on the same loop:

        async with AsyncHTTPClient(headers=auth) as client:
            call = await client.post(url, json_data=payload)
    """

    def __init__(self, timeout: int = 30, max_connections: int = 10,
                 ssl_context: Optional[ssl.SSLContext] = None,
                 headers: Optional[Dict[str, str]] = None,
                 max_retries: int = 3, retry_delay: float = 1.0):
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.max_connections = max_connections
        self.ssl_context = ssl_context
        self.headers = headers or {}
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def start(self):
        if self.session is not None:
            return
        connector = aiohttp.TCPConnector(
            limit=self.max_connections,
            ssl=self.ssl_context if self.ssl_context is not None else True,
        )
        self.session = aiohttp.ClientSession(
            connector=connector,
            timeout=self.timeout,
            headers=self.headers,
            trust_env=True,  # honour HTTP(S)_PROXY
        )

    async def close(self):
        if self.session:
            await self.session.close()
            self.session = None

    async def _send(self, method: str, url: str, **kwargs) -> Any:
        async with self.session.request(method, url, **kwargs) as response:
            response.raise_for_status()
            if response.content_type == 'application/json':
                return await response.json()
            text = await response.text()
            return {"text": text} if text else {}

    async def request(self, method: str, url: str, **kwargs) -> Any:
        """Send a request and decode its JSON body.

        Connection failures and timeouts are retried with exponential backoff;
        an error status raises ``aiohttp.ClientResponseError`` on the first try.
        """
        await self.start()

        attempt = 0
        while True:
            attempt += 1
            try:
                return await self._send(method, url, **kwargs)
            except aiohttp.ClientResponseError:
                raise
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                if attempt >= self.max_retries:
                    logger.error(f"{method} {url} failed after {attempt} attempts: {e}")
                    raise
                delay = self.retry_delay * (2 ** (attempt - 1))
                logger.warning(f"{method} {url} attempt {attempt} failed: {e}, retrying in {delay}s")
                await asyncio.sleep(delay)

    async def post(self, url: str, json_data: Optional[Dict[str, Any]] = None, **kwargs) -> Any:
        if json_data is not None:
            kwargs['json'] = json_data
        return await self.request('POST', url, **kwargs)
