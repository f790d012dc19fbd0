"""End-to-end stitch run: fetch, compose, then publish or write."""

import logging
import time
from dataclasses import dataclass
from pathlib import Path

from .composer import ProgramComposer
from .config import StitchConfig
from .contracts import Bundle
from .runs import RunTracker
from .sources import BundlePublisher, ProjectFetcher, load_games


@dataclass
class StitchResult:
    """Outcome of a successful run."""
    run_id: str
    bundle: Bundle
    share_url: str | None
    output_dir: Path | None
    duration_seconds: float


class StitchRunner:
    """
    Runs the whole pipeline as a single all-or-nothing operation.

    Nothing is written or published until every project has been fetched
    and the bundle is fully composed.
    """

    def __init__(
        self,
        project_path: Path | str,
        config: StitchConfig | None = None,
        tracker: RunTracker | None = None,
        fetcher: ProjectFetcher | None = None,
        publisher: BundlePublisher | None = None,
    ) -> None:
        self.project_path = Path(project_path).resolve()
        self.config = config or StitchConfig.load(self.project_path)
        self.tracker = tracker or RunTracker()
        self.fetcher = fetcher or ProjectFetcher(self.config)
        self.publisher = publisher or BundlePublisher(self.config)
        self.logger = logging.getLogger(self.__class__.__name__)

    def stitch(self, publish: bool = True, output_dir: Path | None = None) -> StitchResult:
        """
        Fetch every listed game, compose the bundle, then publish and/or write it.

        Raises:
            StitchError: retrieval, scanning or publication failed.
            ValueError: the games list is malformed.
        """
        games_file = self.config.games_file(self.project_path)
        run_id = self.tracker.create_run(str(games_file))
        start = time.perf_counter()
        share_url = None

        try:
            entries = load_games(games_file)
            self.logger.info("Stitching %d games from %s", len(entries), games_file)
            projects = self.fetcher.fetch_all(entries)

            composer = ProgramComposer.from_config(self.config, self.project_path)
            bundle = composer.compose(projects)

            share_url = self.publisher.publish(bundle.files) if publish else None
            if output_dir is not None:
                bundle.write_to(output_dir)
                self.logger.info("Wrote %d files to %s", len(bundle.files), output_dir)
        except Exception as e:
            if share_url is not None:
                self.logger.error("Run %s failed after publishing %s", run_id, share_url)
            self.tracker.fail_run(run_id, str(e), share_url=share_url)
            raise

        self.tracker.complete_run(
            run_id,
            program_count=len(projects),
            share_url=share_url,
            output_dir=str(output_dir) if output_dir is not None else None,
        )
        return StitchResult(
            run_id=run_id,
            bundle=bundle,
            share_url=share_url,
            output_dir=output_dir,
            duration_seconds=time.perf_counter() - start,
        )
