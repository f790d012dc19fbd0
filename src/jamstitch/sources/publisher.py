"""Publish a bundle as a shared MakeCode project."""

import json
import logging
import time
import uuid
from contextlib import nullcontext
from typing import Any

import httpx

from ..config import StitchConfig
from ..errors import PublicationError

logger = logging.getLogger(__name__)


class BundlePublisher:
    """Submits the bundle's files in one request. No retries."""

    def __init__(self, config: StitchConfig, client: httpx.Client | None = None) -> None:
        self.config = config
        self.client = client

    def session(self):
        """The injected client, left open, or a fresh client closed on exit."""
        if self.client is not None:
            return nullcontext(self.client)
        return httpx.Client(timeout=self.config.request_timeout)

    def build_request(self, files: dict[str, str]) -> dict[str, Any]:
        """Wrap files in the share envelope expected by the scripts endpoint."""
        now = int(time.time() * 1000)
        header = {
            "name": self.config.project_name,
            "meta": {"versions": dict(self.config.versions)},
            "editor": self.config.editor,
            "pubCurrent": False,
            "target": self.config.target,
            "targetVersion": self.config.target_version,
            "id": str(uuid.uuid4()),
            "recentUse": now,
            "modificationTime": now,
            "path": self.config.project_name,
            "saveId": {},
            "githubCurrent": False,
            "pubVersions": [],
        }

        return {
            "id": header["id"],
            "name": header["name"],
            "target": header["target"],
            "targetVersion": header["targetVersion"],
            "description": self.config.description,
            "editor": header["editor"],
            "header": json.dumps(header),
            "text": json.dumps(files),
            "meta": header["meta"],
        }

    def publish(self, files: dict[str, str]) -> str:
        """
        Publish files and return the share link.

        Raises:
            PublicationError: the request failed or the response had no short id.
        """
        endpoint = f"{self.config.api_root}/api/scripts"
        payload = self.build_request(files)

        try:
            with self.session() as client:
                resp = client.post(endpoint, json=payload)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise PublicationError(f"POST {endpoint} failed: {e}", status_code=status) from e
        except httpx.HTTPError as e:
            raise PublicationError(f"POST {endpoint} failed: {e}") from e
        except ValueError as e:
            raise PublicationError(f"POST {endpoint} returned invalid JSON: {e}") from e

        shortid = data.get("shortid") if isinstance(data, dict) else None
        if not shortid:
            raise PublicationError(f"POST {endpoint} returned no shortid")

        logger.info("Published %s as %s", payload["name"], shortid)
        return f"{self.config.api_root}/{shortid}"
