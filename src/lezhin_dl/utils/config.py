import configparser
import os
from dataclasses import dataclass, field
from typing import Optional

from lezhin_dl.core.episode_range import EpisodeRange
from lezhin_dl.core.exceptions import ConfigError
from lezhin_dl.data.models import Credentials

# 언어 코드 => 지역 설정 값
LOCALES = {
    "ko": "ko-KR",
    "en": "en-US",
    "ja": "ja-JP",
}
SOURCE_IMAGE_FORMAT = "webp"
IMAGE_FORMATS = ("webp", "jpg", "png")
DEFAULT_CONFIG_FILE = "config.ini"


@dataclass
class DownloadConfig:
    language: str
    comic_name: str
    credentials: Credentials
    episode_range: EpisodeRange = field(default_factory=EpisodeRange)
    image_format: str = SOURCE_IMAGE_FORMAT
    output_dir: str = "."
    threads: int = 4
    retries: int = 3
    retry_delay: float = 1.0
    debug: bool = False

    def __post_init__(self):
        self.language = (self.language or "").lower()
        if self.language not in LOCALES:
            raise ConfigError(f"Unsupported language '{self.language}'. Choose one of: {', '.join(LOCALES)}")
        if not self.comic_name or not self.comic_name.strip():
            raise ConfigError("Comic name must not be empty")
        self.comic_name = self.comic_name.strip()
        if isinstance(self.episode_range, str) or self.episode_range is None:
            self.episode_range = EpisodeRange.parse(self.episode_range)
        self.image_format = self.image_format.lower()
        if self.image_format == "jpeg":
            self.image_format = "jpg"
        if self.image_format not in IMAGE_FORMATS:
            raise ConfigError(f"Unsupported image format '{self.image_format}'")
        if self.threads < 1:
            raise ConfigError("Number of threads must be at least 1")
        if self.retries < 1:
            raise ConfigError("Number of attempts must be at least 1")
        if not self.credentials.username or not self.credentials.password:
            raise ConfigError("Username and password are required")

    @property
    def locale(self) -> str:
        return LOCALES[self.language]

    @property
    def save_as(self) -> Optional[str]:
        """Target format to re-encode into, or None to keep the source bytes."""
        return None if self.image_format == SOURCE_IMAGE_FORMAT else self.image_format

    @property
    def headless(self) -> bool:
        return not self.debug


def load_credentials(path: str = DEFAULT_CONFIG_FILE, username: str = None, password: str = None) -> Credentials:
    """
    Reads ``[account]`` section of an ini file. Explicit arguments take
    precedence; the file is optional when both are given.
    """
    if not (username and password):
        if not os.path.isfile(path):
            raise ConfigError(f"Config file not found: {path}")
        parser = configparser.ConfigParser()
        try:
            parser.read(path, encoding="utf-8")
        except configparser.Error as e:
            raise ConfigError(f"Failed to parse {path}: {e}") from e
        if not parser.has_section("account"):
            raise ConfigError(f"Section [account] is missing in {path}")
        username = username or parser.get("account", "username", fallback="").strip()
        password = password or parser.get("account", "password", fallback="").strip()

    if not username or not password:
        raise ConfigError("Username and password are required")
    return Credentials(username=username, password=password)
