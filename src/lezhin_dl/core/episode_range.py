import re
from dataclasses import dataclass
from typing import List, Optional, Union

from lezhin_dl.core.exceptions import RangeBoundsError, RangeParseError
from lezhin_dl.data.models import Episode

_ORDINAL_PATTERN = re.compile(r'^\d+$', re.ASCII)
_RANGE_PATTERN = re.compile(r'^(\d*)\s*-\s*(\d*)$', re.ASCII)


@dataclass(frozen=True)
class EpisodeRange:
    """
    Episode selection by ordinal.
    ``start``/``end`` of None mean the first/last episode.
    """
    start: Optional[int] = None
    end: Optional[int] = None

    @property
    def is_all(self) -> bool:
        return self.start is None and self.end is None

    @classmethod
    def parse(cls, text: Optional[str]) -> "EpisodeRange":
        """
        Accepts ``all``, ``N``, ``N-M``, ``N-`` and ``-M``.
        Empty or None selects every episode.
        """
        if text is None:
            return cls()
        text = text.strip()
        if not text or text.lower() == "all":
            return cls()

        if _ORDINAL_PATTERN.match(text):
            n = cls._ordinal(text)
            return cls(n, n)

        match = _RANGE_PATTERN.match(text)
        if not match or not (match.group(1) or match.group(2)):
            raise RangeParseError(f"Invalid episode range: '{text}'")

        start = cls._ordinal(match.group(1)) if match.group(1) else None
        end = cls._ordinal(match.group(2)) if match.group(2) else None
        if start is not None and end is not None and start > end:
            raise RangeParseError(f"Start of episode range must not be greater than end: '{text}'")
        return cls(start, end)

    @staticmethod
    def _ordinal(digits: str) -> int:
        n = int(digits)
        if n < 1:
            raise RangeBoundsError(n)
        return n

    def resolve(self, episodes: List[Episode]) -> List[Episode]:
        """Episodes must already be in chronological order."""
        count = len(episodes)
        if self.is_all:
            return list(episodes)

        start = self.start if self.start is not None else 1
        end = self.end if self.end is not None else count
        for ordinal in (start, end):
            if not 1 <= ordinal <= count:
                raise RangeBoundsError(ordinal, count)
        return list(episodes[start - 1:end])

    def __str__(self):
        if self.is_all:
            return "all"
        if self.start == self.end:
            return str(self.start)
        return f"{self.start or ''}-{self.end or ''}"


def resolve(expression: Union[str, EpisodeRange, None], episodes: List[Episode]) -> List[Episode]:
    episode_range = expression if isinstance(expression, EpisodeRange) else EpisodeRange.parse(expression)
    return episode_range.resolve(episodes)
