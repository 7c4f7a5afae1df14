import io
import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Iterator, List, Optional

import requests
from PIL import Image
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from lezhin_dl.core import urls
from lezhin_dl.core.exceptions import ImageFetchError
from lezhin_dl.data.models import DownloadReport, DownloadTarget, Episode, ImageResult, Product
from lezhin_dl.utils.config import SOURCE_IMAGE_FORMAT
from lezhin_dl.utils.logger import logger

# Pillow format names
PIL_FORMATS = {"jpg": "JPEG", "png": "PNG", "webp": "WEBP"}
# Every non-2xx response is worth another attempt
RETRY_STATUS = frozenset(range(400, 600))


class ImageDownloader:
    def __init__(self, output_dir: str, max_threads: int = 4, retries: int = 3, retry_delay: float = 1.0,
                 timeout: int = 30, save_as: Optional[str] = None, session=None, stop_event=None):
        """
        :param retries: Number of attempts per image, including the first one
        :param save_as: Format to re-encode into ('jpg', 'png'); None keeps the source bytes
        """
        self.output_dir = output_dir
        self.max_threads = max_threads
        self.retries = retries
        self.retry_delay = retry_delay
        self.timeout = timeout
        self.save_as = save_as
        self.session = session or self._create_session()
        self.stop_event = stop_event or threading.Event()

    def _create_session(self):
        session = requests.Session()
        retries = Retry(
            total=self.retries - 1,
            backoff_factor=self.retry_delay,
            status_forcelist=RETRY_STATUS,
            allowed_methods=["GET"],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(pool_connections=self.max_threads, pool_maxsize=self.max_threads, max_retries=retries)
        session.mount('https://', adapter)
        session.mount('http://', adapter)
        return session

    @property
    def extension(self) -> str:
        return self.save_as or SOURCE_IMAGE_FORMAT

    def episode_dir(self, product: Product, episode: Episode) -> str:
        return os.path.join(self.output_dir, product.title, episode.label)

    def iter_targets(self, product: Product, episode: Episode, count: int, access_token: str) -> Iterator[DownloadTarget]:
        save_dir = self.episode_dir(product, episode)
        for index in range(1, count + 1):
            # The server only serves its native format.
            url = urls.image_url(product.id, episode.id, index, SOURCE_IMAGE_FORMAT, access_token, episode.purchased)
            yield DownloadTarget(
                episode=episode,
                index=index,
                path=os.path.join(save_dir, f"{index}.{self.extension}"),
                url=url,
            )

    def download(self, product: Product, episodes: List[Episode], access_token: str,
                 count_images: Callable[[Episode], int]) -> DownloadReport:
        """
        Downloads every image of the episodes.

        ``count_images`` is called on this thread, one episode at a time, while
        the images of episodes already counted are fetched by the workers.
        """
        report = DownloadReport()
        futures = {}
        executor = ThreadPoolExecutor(max_workers=self.max_threads)
        try:
            for episode in episodes:
                if self.stop_event.is_set():
                    break
                count = count_images(episode)
                report.add_episode(episode)
                logger.info(f"[{episode.ordinal}/{len(product.episodes)}] {episode.title}: {count} images")
                if count == 0:
                    if not (episode.free or episode.purchased):
                        logger.warning(f"Episode '{episode.title}' is neither free nor purchased")
                    continue
                os.makedirs(self.episode_dir(product, episode), exist_ok=True)
                for target in self.iter_targets(product, episode, count, access_token):
                    futures[executor.submit(self.download_image, target)] = target

            for future in as_completed(futures):
                report.record(future.result())
        except KeyboardInterrupt:
            logger.warning("Interrupted. Waiting for running downloads to finish...")
            self.stop_event.set()
            executor.shutdown(wait=True, cancel_futures=True)
            raise
        finally:
            executor.shutdown(wait=True)

        return report

    def download_image(self, target: DownloadTarget) -> ImageResult:
        if self.stop_event.is_set():
            return ImageResult(target, success=False, error="cancelled")
        if os.path.exists(target.path):
            logger.debug(f"Already exists: {target.path}")
            return ImageResult(target, success=True, skipped=True)

        try:
            data, attempts = self._fetch(target.url)
        except ImageFetchError as e:
            logger.error(f"[{target.episode.title}] image {target.index}: {e.reason} ({e.attempts} attempts)")
            return ImageResult(target, success=False, attempts=e.attempts, error=str(e))

        try:
            if self.save_as:
                data = self._convert(data, self.save_as)
            self._write(target.path, data)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to save {target.path}: {e}")
            return ImageResult(target, success=False, attempts=attempts, error=str(e))

        return ImageResult(target, success=True, attempts=attempts)

    def _fetch(self, url: str):
        """
        Returns (bytes, attempts). Retrying non-2xx responses and transport
        errors is left to the Retry of the session's adapter.
        """
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise ImageFetchError(url, self.retries, str(e)) from e

        try:
            attempts = self._attempts(response)
            response.raise_for_status()
            return response.content, attempts
        except requests.RequestException as e:
            raise ImageFetchError(url, attempts, str(e)) from e
        finally:
            response.close()

    @staticmethod
    def _attempts(response) -> int:
        retries = getattr(getattr(response, "raw", None), "retries", None)
        if retries is None:
            return 1
        return len(retries.history) + 1

    @staticmethod
    def _convert(data: bytes, image_format: str) -> bytes:
        with Image.open(io.BytesIO(data)) as image:
            if image_format == "jpg" and image.mode != "RGB":
                image = image.convert("RGB")
            buffer = io.BytesIO()
            image.save(buffer, PIL_FORMATS[image_format])
            return buffer.getvalue()

    @staticmethod
    def _write(path: str, data: bytes):
        # Written beside the final path so an interrupted write never leaves a broken image there.
        temp_path = path + ".part"
        try:
            with open(temp_path, 'wb') as f:
                f.write(data)
            os.replace(temp_path, path)
        except OSError:
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise
