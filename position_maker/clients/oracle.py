"""现货价格预言机 HTTP 客户端。"""

from __future__ import annotations

from typing import Optional

import httpx

from ..config import Settings
from ..errors import OracleFetchError
from ..logging_config import get_logger
from ..types import OracleReading
from .feeds import resolve_normalizer

logger = get_logger(__name__)


class OracleClient:
    """按合约给出的 oracle URL 拉取 JSON 并归一化。

    任何网络或解析失败都会以 `OracleFetchError` 抛出，调用方不会拿到旧价格。
    """

    def __init__(self, settings: Settings, http: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self._http = http or httpx.AsyncClient(timeout=settings.http_timeout_seconds)

    async def fetch(self, url: str) -> OracleReading:
        """请求 oracle URL 并返回归一化后的 `OracleReading`。

        Args:
            url: 合约中记录的 oracle 地址。

        Raises:
            OracleFetchError: 请求失败、非 2xx 响应、非 JSON 或结构不符。
        """
        normalizer = resolve_normalizer(url, self.settings.oracle_provider)
        try:
            resp = await self._http.get(url)
            resp.raise_for_status()
            payload = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("oracle_fetch_failed", url=url, error=str(exc))
            raise OracleFetchError(f"Oracle fetch failed for {url}: {exc}", url=url) from exc
        return normalizer(payload)

    async def close(self) -> None:
        await self._http.aclose()


__all__ = ["OracleClient"]
