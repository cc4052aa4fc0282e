# backend/tubemaster/agents/competitor_agent.py

import asyncio
import html
import logging
import re
from typing import Optional
from urllib.parse import urlparse

import requests
from pydantic import ValidationError

from ..clients.chat_client import ChatCompletionClient
from ..errors import MalformedOutputError
from ..models import CompetitorReport
from ..sanitizer import parse_json_object

log = logging.getLogger("tubemaster")

COMPETITOR_SYSTEM = "Act as a YouTube Strategist. Return strictly JSON."

COMPETITOR_PROMPT = """Analyze this YouTube channel info: {page_text}
Identify 3 strengths, 3 weaknesses, 3 content gaps, and an action plan.
Return JSON with keys: channelName, subscriberEstimate, strengths, weaknesses, contentGaps, actionPlan."""

PAGE_TEXT_LIMIT = 2000
SCRAPE_TIMEOUT_SECONDS = 10

# Only public YouTube pages are fetched; anything else is inferred from the URL.
SCRAPE_HOSTS = frozenset({"youtube.com", "www.youtube.com", "m.youtube.com"})

_TITLE = re.compile(r"<title>(.*?)</title>", re.I | re.S)
_DESCRIPTION = re.compile(r'name="description" content="(.*?)"', re.I | re.S)


def is_scrapable(channel_url: str) -> bool:
    try:
        parsed = urlparse(channel_url)
        host = (parsed.hostname or "").lower()
        port = parsed.port
    except ValueError:
        return False
    return parsed.scheme == "https" and host in SCRAPE_HOSTS and port in (None, 443)


def _url_only_summary(channel_url: str) -> str:
    return f"Channel URL: {channel_url} (Scrape failed, purely inferring from URL structure)"


def fetch_channel_summary(channel_url: str, session: Optional[requests.Session] = None) -> str:
    """
    Scrape the channel page title and meta description.

    Best effort: if the URL is not a YouTube page or the page can't be fetched,
    the summary only carries the URL and the model infers from that.
    """
    if not is_scrapable(channel_url):
        log.warning("Not scraping non-YouTube URL %s", channel_url)
        return _url_only_summary(channel_url)

    http = session or requests
    try:
        resp = http.get(channel_url, timeout=SCRAPE_TIMEOUT_SECONDS)
        resp.raise_for_status()
    except requests.RequestException as e:
        log.warning("Channel scrape failed for %s: %s", channel_url, e)
        return _url_only_summary(channel_url)

    page = resp.text or ""
    title = _TITLE.search(page)
    desc = _DESCRIPTION.search(page)
    title_text = html.unescape(title.group(1).strip()) if title else "Unknown"
    desc_text = html.unescape(desc.group(1).strip()) if desc else "Unknown"
    return f"Channel: {title_text}\nDesc: {desc_text}"


async def run_competitor_agent(
    channel_url: str,
    client: ChatCompletionClient,
    session: Optional[requests.Session] = None,
) -> CompetitorReport:
    channel_url = (channel_url or "").strip()
    if not channel_url:
        raise ValueError("Channel URL must not be empty.")

    log.info("🕵️ Competitor Agent started (%s)", channel_url)
    page_text = await asyncio.to_thread(fetch_channel_summary, channel_url, session)

    prompt = COMPETITOR_PROMPT.format(page_text=page_text[:PAGE_TEXT_LIMIT])
    raw = await client.complete_text(COMPETITOR_SYSTEM, prompt)
    payload = parse_json_object(raw)

    try:
        report = CompetitorReport.model_validate(payload)
    except ValidationError as e:
        raise MalformedOutputError(f"Competitor report failed validation: {e}", raw=raw) from e

    log.info("✅ Competitor Agent complete (%s)", report.channel_name)
    return report
