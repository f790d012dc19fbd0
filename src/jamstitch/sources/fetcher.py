"""Fetch jam projects from the MakeCode backend."""

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import nullcontext
from dataclasses import dataclass
from pathlib import Path

import httpx

from ..config import StitchConfig
from ..contracts import ProjectConfig, ProjectMeta, SourceProject
from ..errors import RetrievalError

logger = logging.getLogger(__name__)


@dataclass
class GameEntry:
    """One line of the games list: where to fetch a game and who wrote it."""
    url: str
    author: str


def load_games(path: Path) -> list[GameEntry]:
    """Read the games list. Raises ValueError if it is malformed."""
    data = json.loads(path.read_text(encoding="utf-8"))
    try:
        return [GameEntry(url=g["url"], author=g["author"]) for g in data["games"]]
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed games list {path}: {e}") from e


class ProjectFetcher:
    """Retrieves every project concurrently; one failure fails the batch."""

    def __init__(self, config: StitchConfig, client: httpx.Client | None = None) -> None:
        self.config = config
        self.client = client

    def project_id(self, url: str) -> str:
        if not url.startswith(self.config.share_prefix):
            raise RetrievalError(url, f"not a share link under {self.config.share_prefix}")
        return url[len(self.config.share_prefix):]

    def session(self):
        """The injected client, left open, or a fresh client closed on exit."""
        if self.client is not None:
            return nullcontext(self.client)
        return httpx.Client(timeout=self.config.request_timeout)

    def fetch_all(self, entries: list[GameEntry]) -> list[SourceProject]:
        """
        Fetch all entries, preserving input order.

        Raises:
            RetrievalError: any single project could not be fetched or parsed.
        """
        if not entries:
            return []
        with self.session() as client:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
                projects = list(executor.map(lambda entry: self.fetch(entry, client), entries))
        logger.info("Fetched %d projects", len(projects))
        return projects

    def fetch(self, entry: GameEntry, client: httpx.Client | None = None) -> SourceProject:
        """Fetch metadata and sources for one entry."""
        if client is None:
            with self.session() as client:
                return self.fetch(entry, client)

        project_id = self.project_id(entry.url)
        base = f"{self.config.backend_endpoint}/{project_id}"

        meta = self._get_json(client, entry.url, base)
        text = self._get_json(client, entry.url, f"{base}/text")
        if not isinstance(text, dict) or "pxt.json" not in text:
            raise RetrievalError(entry.url, "project text has no pxt.json")

        try:
            config = ProjectConfig.from_json(text["pxt.json"])
        except ValueError as e:
            raise RetrievalError(entry.url, f"invalid pxt.json: {e}") from e

        logger.debug("Fetched %s (%d files)", entry.url, len(text))
        return SourceProject(
            url=entry.url,
            author=entry.author,
            meta=ProjectMeta.from_dict(meta if isinstance(meta, dict) else {}),
            text=text,
            config=config,
        )

    def _get_json(self, client: httpx.Client, url: str, endpoint: str):
        try:
            resp = client.get(endpoint)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPError as e:
            raise RetrievalError(url, f"GET {endpoint} failed: {e}") from e
        except ValueError as e:
            raise RetrievalError(url, f"GET {endpoint} returned invalid JSON: {e}") from e
