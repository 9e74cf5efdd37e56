# services/crawler.py

import logging

import requests

from app.errors import CrawlError

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; UXAuditorBot/1.0)",
}

# 400KB 超のページは解析しない
DEFAULT_MAX_CHARS = 400_000


def fetch_html(url: str, timeout: float = 8.0, max_chars: int = DEFAULT_MAX_CHARS) -> str:
    """
    単純な GET だけのクロール。リトライは入れていない。
    失敗はすべて CrawlError に変換し、メッセージはそのまま API のエラー文言になる。
    """
    logger.info("[crawler] GET %s timeout=%s", url, timeout)

    try:
        resp = requests.get(url, headers=DEFAULT_HEADERS, timeout=timeout)
    except requests.Timeout as e:
        raise CrawlError("Request timeout. Page took too long to load.") from e
    except requests.RequestException as e:
        raise CrawlError(str(e)) from e

    if not 200 <= resp.status_code < 300:
        logger.warning("[crawler] Non-2xx status: %s url=%s", resp.status_code, url)
        raise CrawlError(f"HTTP {resp.status_code}")

    html = resp.text
    if len(html) > max_chars:
        logger.warning("[crawler] Page too large: length=%s url=%s", len(html), url)
        raise CrawlError("Page too large (>400KB). Try another page.")

    logger.info("[crawler] fetched url=%s length=%s", url, len(html))
    return html
