"""
Tenor GIF API client for Birthder.

Supplies the decoration image for birthday congratulations. Transport failures and
5xx answers are retried according to a RetryPolicy; images from the blacklist or
with an unexpected URL shape are ignored. The image is optional:
fetch_decoration_image() returns None instead of raising when nothing usable can be
found.

API docs: https://tenor.com/gifapi/documentation
"""

import random
import re
from typing import List, Optional

import requests

from config import (
    RETRY_LIMITS,
    TENOR_API_KEY,
    TENOR_API_URL,
    TENOR_BLACKLIST,
    TENOR_IMG_LIMIT,
    TENOR_SEARCH_TERM,
    TIMEOUTS,
    get_logger,
)
from utils.errors import ImageProviderError, RetryError
from utils.retry import RetryPolicy, retry_call

logger = get_logger("tenor")

TENOR_GIF_URL = re.compile(r"^(https?://media\.tenor\.com/images/([0-9a-z]+)/tenor\.gif)$", re.I)


class TenorServerError(requests.HTTPError):
    """5xx answer from Tenor; worth another attempt unlike 4xx (bad key, bad request)."""



def select_image_url(response: dict, blacklist=TENOR_BLACKLIST, rng=random) -> str:
    """
    Select a random image URL from a Tenor search response

    Args:
        response: Decoded JSON of the search endpoint
        blacklist: Image IDs that must never be posted
        rng: Source of randomness

    Returns:
        Image URL, or "" when no result is usable
    """
    candidates = []
    for item in response.get("results", []):
        try:
            url = item["media"][0]["gif"]["url"]
        except (KeyError, IndexError, TypeError):
            continue

        match = TENOR_GIF_URL.match(url)
        if not match:
            continue
        if match.group(2) in blacklist:
            logger.info(f"TENOR: Skipping blacklisted image {match.group(2)}")
            continue
        candidates.append(url)

    if not candidates:
        return ""
    return rng.choice(candidates)


class TenorImageProvider:
    """Fetches birthday GIFs from Tenor."""

    def __init__(
        self,
        api_key: str = TENOR_API_KEY,
        search_terms: List[str] = None,
        limit: int = TENOR_IMG_LIMIT,
        blacklist: List[str] = None,
        policy: RetryPolicy = None,
        session: requests.Session = None,
        max_searches: int = RETRY_LIMITS["image_selection"],
    ):
        self.api_key = api_key
        self.search_terms = search_terms or TENOR_SEARCH_TERM
        self.limit = limit
        self.blacklist = TENOR_BLACKLIST if blacklist is None else blacklist
        self.policy = policy or RetryPolicy()
        self.session = session or requests.Session()
        self.max_searches = max_searches

    def _get_json(self, endpoint: str, params: dict) -> dict:
        def request():
            response = self.session.get(
                f"{TENOR_API_URL}/{endpoint}",
                params=params,
                timeout=TIMEOUTS["http_request"],
            )
            if response.status_code >= 500:
                raise TenorServerError(f"Tenor answered {response.status_code}", response=response)
            response.raise_for_status()
            return response.json()

        return retry_call(
            request,
            self.policy,
            retry_on=(requests.ConnectionError, requests.Timeout, TenorServerError),
            description=f"Tenor {endpoint} request",
        )

    def search(self, tag: str) -> dict:
        anon_id = self._get_json("anonid", {"key": self.api_key}).get("anon_id")
        params = {"tag": tag, "key": self.api_key, "limit": self.limit}
        if anon_id:
            params["anon_id"] = anon_id
        return self._get_json("search", params)

    def grab_image(self, tags: List[str] = None) -> str:
        """
        Get an image URL, searching again with a new random tag when a search yields
        nothing usable

        Raises:
            ImageProviderError: when requests keep failing or no search returned a
                usable image
        """
        tags = tags or self.search_terms
        for attempt in range(1, self.max_searches + 1):
            tag = random.choice(tags)
            try:
                image_url = select_image_url(self.search(tag), self.blacklist)
            except RetryError as e:
                raise ImageProviderError(f"Tenor is unreachable: {e}") from e
            except (requests.RequestException, ValueError) as e:
                raise ImageProviderError(f"Tenor request failed: {e}") from e

            if image_url:
                logger.info(f"TENOR: Selected image for tag '{tag}'")
                return image_url
            logger.info(f"TENOR: No images returned for '{tag}' (attempt {attempt}), searching again")

        raise ImageProviderError(f"No usable image after {self.max_searches} searches")

    def fetch_decoration_image(self, tags: List[str] = None) -> Optional[str]:
        """Best-effort variant of grab_image(): None instead of an exception."""
        try:
            return self.grab_image(tags)
        except ImageProviderError as e:
            logger.error(f"TENOR_ERROR: {e}")
            return None
