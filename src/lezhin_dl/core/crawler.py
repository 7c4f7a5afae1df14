from typing import Optional

from selenium.common.exceptions import TimeoutException

from lezhin_dl.core import urls
from lezhin_dl.core.browser import Browser, DEFAULT_TIMEOUT
from lezhin_dl.core.exceptions import CrawlExtractionError, CrawlTimeoutError
from lezhin_dl.data.models import Episode, Product
from lezhin_dl.parser import lezhin
from lezhin_dl.parser.lezhin import LezhinParser
from lezhin_dl.utils.logger import logger


class CatalogCrawler:
    def __init__(self, browser: Browser, language: str, locale: str, comic_name: str,
                 parser: LezhinParser = None, timeout: int = DEFAULT_TIMEOUT):
        self.browser = browser
        self.language = language
        self.locale = locale
        self.comic_name = comic_name
        self.parser = parser or LezhinParser()
        self.timeout = timeout
        self.expired = None

    def fetch_catalog(self) -> Optional[str]:
        """
        Returns the comic information as JSON string, or None when the page
        rendered but holds no product.
        """
        # 언어/지역 설정 변경 페이지가 노출되면 다운로드할 수 없기에, 미리 설정을 변경한다.
        locale_url = urls.locale_url(self.language, self.locale)
        logger.debug(f"Change locale setting: {locale_url}")
        self.browser.navigate(locale_url)

        comic_url = urls.comic_url(self.language, self.comic_name)
        logger.info(f"Request comic page: {comic_url}")
        self.browser.navigate(comic_url)

        # 서비스 종료된 웹툰인지 확인한다.
        if self.expired is None:
            self.expired = urls.same_path(self.browser.current_url(), urls.expired_url(self.language))

        if self.expired:
            logger.info("Comic is expired -> try to find it in 'My Library'")
            library_url = urls.library_comic_url(self.language, self.locale, self.comic_name)
            logger.debug(f"Request comic page in 'My Library': {library_url}")
            self.browser.navigate(library_url)
            landmark = lezhin.LIBRARY_LANDMARK
        else:
            landmark = lezhin.COMIC_LANDMARK

        try:
            self.browser.wait_for_visible(landmark, self.timeout)
        except TimeoutException as e:
            raise CrawlTimeoutError(f"Episode list was not rendered within {self.timeout} sec: {comic_url}") from e

        self.browser.execute_script(lezhin.STORE_PRODUCT_SCRIPT)
        json_text = self.browser.read_local_storage(lezhin.PRODUCT_STORAGE_KEY)
        # JSON.stringify(undefined) is stored as the string "undefined"
        if not json_text or json_text in ("undefined", "null"):
            logger.warning("No product information in local storage")
            return None
        return json_text

    def fetch_product(self) -> Optional[Product]:
        json_text = self.fetch_catalog()
        if json_text is None:
            return None
        try:
            return self.parser.parse_product(json_text, expired=bool(self.expired))
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise CrawlExtractionError(f"Product information of '{self.comic_name}' is not usable: {e!r}") from e

    def count_images(self, product: Product, episode: Episode) -> int:
        """Number of downloadable cuts in the episode; 0 when the viewer stays empty."""
        if product.expired:
            url = urls.library_episode_url(self.language, self.locale, product.alias, episode.name)
        else:
            url = urls.episode_url(self.language, product.alias, episode.name)
        logger.debug(f"Request episode page: {url}")
        self.browser.navigate(url)

        try:
            self.browser.wait_for_visible(lezhin.SCROLL_LIST, self.timeout)
        except TimeoutException:
            logger.warning(f"Images of episode '{episode.title}' were not rendered within {self.timeout} sec")
            return 0
        return self.parser.count_cuts(self.browser.page_source())
