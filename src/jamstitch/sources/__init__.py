from .fetcher import GameEntry, ProjectFetcher, load_games
from .publisher import BundlePublisher

__all__ = [
    "GameEntry",
    "ProjectFetcher",
    "load_games",
    "BundlePublisher",
]
