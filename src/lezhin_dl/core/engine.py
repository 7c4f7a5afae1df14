import threading

from lezhin_dl.core.browser import Browser
from lezhin_dl.core.crawler import CatalogCrawler
from lezhin_dl.core.downloader import ImageDownloader
from lezhin_dl.core.exceptions import CrawlExtractionError
from lezhin_dl.core.login import TokenResolver
from lezhin_dl.data.models import DownloadReport
from lezhin_dl.utils.config import DownloadConfig
from lezhin_dl.utils.logger import logger


class DownloadEngine:
    def __init__(self, config: DownloadConfig, browser: Browser = None, downloader: ImageDownloader = None):
        """
        :param browser: Session handle owned by the engine; closed when ``start`` returns or raises
        :param downloader: Defaults to one built from ``config``
        """
        self.config = config
        self.stop_event = threading.Event()
        self.browser = browser or Browser(headless=config.headless)
        self.downloader = downloader or ImageDownloader(
            output_dir=config.output_dir,
            max_threads=config.threads,
            retries=config.retries,
            retry_delay=config.retry_delay,
            save_as=config.save_as,
            stop_event=self.stop_event,
        )
        self.token_resolver = TokenResolver(self.browser, config.language)
        self.crawler = CatalogCrawler(self.browser, config.language, config.locale, config.comic_name)
        self.product = None
        self.is_running = False

    def start(self) -> DownloadReport:
        """로그인부터 다운로드까지 실행합니다. 완료 또는 실패 시 브라우저를 닫습니다."""
        self.stop_event.clear()
        self.is_running = True
        logger.info(f"Starting download of '{self.config.comic_name}' (episodes: {self.config.episode_range})")

        try:
            access_token = self.token_resolver.login(self.config.credentials)

            product = self.crawler.fetch_product()
            if product is None:
                raise CrawlExtractionError(f"Failed to extract information of comic '{self.config.comic_name}'")
            product.sanitize()
            self.product = product
            artists = ", ".join(a.name for a in product.artists)
            logger.info(f"Found '{product.title}' by {artists or 'unknown'}: {len(product.episodes)} episodes")

            episodes = self.config.episode_range.resolve(product.episodes)
            logger.info(f"Episodes to download: {len(episodes)}")

            report = self.downloader.download(
                product, episodes, access_token,
                count_images=lambda episode: self.crawler.count_images(product, episode),
            )
            self._log_summary(report)
            return report
        finally:
            self.stop()

    def stop(self):
        self.is_running = False
        self.stop_event.set()
        self.browser.quit()

    @staticmethod
    def _log_summary(report: DownloadReport):
        for ordinal, counts in report.by_episode().items():
            line = f"  {ordinal}_{counts['title']}: {counts['succeeded']} succeeded, {counts['failed']} failed"
            if counts['failed'] or not counts['succeeded']:
                logger.warning(line)
            else:
                logger.info(line)
        logger.info(f"Download finished: {report.succeeded} succeeded, {report.failed} failed")
        for result in report.failures:
            logger.warning(f"Failed: {result.target.path} ({result.error})")
