import json
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from lezhin_dl.utils.filename import sanitize_name


@dataclass
class Credentials:
    username: str
    password: str = field(repr=False)


@dataclass
class Artist:
    name: str
    role: str = ""


@dataclass
class Episode:
    id: int
    name: str
    title: str
    seq: Optional[int] = None
    purchased: bool = False
    free: bool = False
    ordinal: int = 0

    @property
    def label(self) -> str:
        """Directory name of the episode, e.g. ``3_Chapter 3``."""
        return f"{self.ordinal}_{self.title}"

    @classmethod
    def from_dict(cls, data: dict) -> "Episode":
        display = data.get("display") or {}
        title = display.get("title") or data.get("title") or str(data.get("name", ""))
        seq = data.get("seq")
        return cls(
            id=int(data["id"]),
            name=str(data["name"]),
            title=title,
            seq=int(seq) if seq is not None else None,
            purchased=bool(data.get("purchased", False)),
            free=bool(data.get("freedAt")) or data.get("coin", 1) == 0,
        )


@dataclass
class Product:
    id: int
    alias: str
    title: str
    artists: List[Artist] = field(default_factory=list)
    episodes: List[Episode] = field(default_factory=list)
    expired: bool = False

    @classmethod
    def from_json(cls, json_text: str, expired: bool = False) -> "Product":
        data = json.loads(json_text)
        if not isinstance(data, dict):
            raise ValueError(f"Product must be a JSON object, not {type(data).__name__}")
        display = data.get("display") or {}
        episodes = [Episode.from_dict(e) for e in data.get("episodes") or []]
        return cls(
            id=int(data["id"]),
            alias=data["alias"],
            title=display.get("title") or data["alias"],
            artists=[Artist(name=a.get("name", ""), role=a.get("role", "")) for a in data.get("artists") or []],
            episodes=chronological(episodes),
            expired=expired,
        )

    def sanitize(self):
        """Replaces characters not allowed in directory names, in place."""
        self.title = sanitize_name(self.title)
        for artist in self.artists:
            artist.name = sanitize_name(artist.name)
        for episode in self.episodes:
            episode.title = sanitize_name(episode.title, fallback=episode.name)


def chronological(episodes: List[Episode]) -> List[Episode]:
    """
    The catalog lists episodes latest first. Reverses them and, when every
    episode carries a sequence number, sorts by it (stable) so that ordinal 1
    is always the earliest episode. Ordinals are reassigned densely.
    """
    ordered = list(reversed(episodes))
    if ordered and all(e.seq is not None for e in ordered):
        ordered.sort(key=lambda e: e.seq)
    for i, episode in enumerate(ordered):
        episode.ordinal = i + 1
    return ordered


@dataclass
class DownloadTarget:
    episode: Episode
    index: int
    path: str
    url: str = field(default="", repr=False)


@dataclass
class ImageResult:
    target: DownloadTarget
    success: bool
    attempts: int = 0
    error: str = ""
    skipped: bool = False


class DownloadReport:
    """
    Outcome of every image, one slot per destination path.
    Slots are written by the thread collecting futures, never by workers.
    """

    def __init__(self):
        self.results: Dict[str, ImageResult] = OrderedDict()
        self.episodes: Dict[int, Episode] = {}

    def add_episode(self, episode: Episode):
        """Lists the episode in the summary even when it has no image."""
        self.episodes[episode.ordinal] = episode

    def record(self, result: ImageResult):
        path = result.target.path
        if path in self.results:
            raise ValueError(f"Result already recorded for {path}")
        self.results[path] = result

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results.values() if r.success)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results.values() if not r.success)

    @property
    def failures(self) -> List[ImageResult]:
        return [r for r in self.results.values() if not r.success]

    def by_episode(self) -> "OrderedDict[int, dict]":
        """Per-episode counts keyed by ordinal, in ordinal order."""
        summary = OrderedDict()
        for ordinal in sorted(self.episodes):
            summary[ordinal] = {"title": self.episodes[ordinal].title, "succeeded": 0, "failed": 0}
        for r in sorted(self.results.values(), key=lambda r: (r.target.episode.ordinal, r.target.index)):
            ep = r.target.episode
            counts = summary.setdefault(ep.ordinal, {"title": ep.title, "succeeded": 0, "failed": 0})
            counts["succeeded" if r.success else "failed"] += 1
        return summary
