import pytest

from lezhin_dl.core import urls
from lezhin_dl.core.crawler import CatalogCrawler
from lezhin_dl.core.exceptions import CrawlExtractionError, CrawlTimeoutError
from lezhin_dl.data.models import Product
from lezhin_dl.parser import lezhin

VIEWER_HTML = """<div id="scroll-list">
  <div class="cut" data-cut-index="1" data-cut-type="top"></div>
  <div class="cut" data-cut-index="2" data-cut-type="cut"></div>
  <div class="cut" data-cut-index="3" data-cut-type="cut"></div>
  <div class="cut cutLicense" data-cut-index="4" data-cut-type="bottom"></div>
</div>"""


def make_crawler(browser):
    return CatalogCrawler(browser, "ko", "ko-KR", "snail")


def test_fetch_catalog_sets_locale_first(fake_browser, product_json):
    browser = fake_browser(local_storage={"product": product_json})
    crawler = make_crawler(browser)

    assert crawler.fetch_catalog() == product_json
    assert browser.visited == [urls.locale_url("ko", "ko-KR"), urls.comic_url("ko", "snail")]
    assert lezhin.STORE_PRODUCT_SCRIPT in browser.scripts
    assert crawler.expired is False


def test_expired_comic_is_crawled_in_library(fake_browser, product_json):
    browser = fake_browser(
        redirects={urls.comic_url("ko", "snail"): urls.expired_url("ko")},
        hidden={lezhin.COMIC_LANDMARK},
        local_storage={"product": product_json},
    )
    crawler = make_crawler(browser)

    product = crawler.fetch_product()
    assert crawler.expired is True
    assert product.expired is True
    assert browser.visited[-1] == urls.library_comic_url("ko", "ko-KR", "snail")


def test_expired_flag_is_not_reevaluated(fake_browser, product_json):
    browser = fake_browser(local_storage={"product": product_json})
    crawler = make_crawler(browser)
    crawler.fetch_catalog()
    browser.redirects[urls.comic_url("ko", "snail")] = urls.expired_url("ko")
    crawler.fetch_catalog()
    assert crawler.expired is False


def test_landmark_timeout_is_fatal(fake_browser):
    browser = fake_browser(hidden={lezhin.COMIC_LANDMARK})
    with pytest.raises(CrawlTimeoutError):
        make_crawler(browser).fetch_catalog()


def test_missing_local_storage_returns_none(fake_browser):
    crawler = make_crawler(fake_browser())
    assert crawler.fetch_catalog() is None
    assert crawler.fetch_product() is None


@pytest.mark.parametrize("stored", ["undefined", "null", ""])
def test_stored_undefined_catalog_returns_none(fake_browser, stored):
    crawler = make_crawler(fake_browser(local_storage={"product": stored}))
    assert crawler.fetch_catalog() is None
    assert crawler.fetch_product() is None


@pytest.mark.parametrize("stored", ["[]", "{not json", '{"id": 1}'])
def test_unusable_catalog_raises_extraction_error(fake_browser, stored):
    crawler = make_crawler(fake_browser(local_storage={"product": stored}))
    with pytest.raises(CrawlExtractionError):
        crawler.fetch_product()


def test_count_images_uses_public_viewer(fake_browser, product_json):
    product = Product.from_json(product_json)
    episode = product.episodes[0]
    viewer_url = urls.episode_url("ko", "snail", episode.name)
    browser = fake_browser(pages={viewer_url: VIEWER_HTML})

    assert make_crawler(browser).count_images(product, episode) == 2
    assert browser.visited == [viewer_url]


def test_count_images_uses_library_viewer_for_expired_comic(fake_browser, product_json):
    product = Product.from_json(product_json, expired=True)
    episode = product.episodes[1]
    viewer_url = urls.library_episode_url("ko", "ko-KR", "snail", episode.name)
    browser = fake_browser(pages={viewer_url: VIEWER_HTML})

    assert make_crawler(browser).count_images(product, episode) == 2
    assert browser.visited == [viewer_url]


def test_count_images_is_zero_when_viewer_never_renders(fake_browser, product_json):
    product = Product.from_json(product_json)
    browser = fake_browser(hidden={lezhin.SCROLL_LIST})
    assert make_crawler(browser).count_images(product, product.episodes[0]) == 0
