"""
Markup of lezhin.com the crawler relies on.

The platform keeps comic information in ``window.__LZ_PRODUCT__`` instead of a
network response, e.g.::

    <script>
    __LZ_PRODUCT__ = { productType: 'comic', product: {...}, departure: '', all: {...} };
    __LZ_CONFIG__ = { token: '...', ... };
    </script>

so it is copied into local storage and read back from there.
"""
from typing import Optional
from bs4 import BeautifulSoup
from selenium.webdriver.common.by import By
from .base_parser import BaseParser
from lezhin_dl.data.models import Product

# Comic page has finished rendering
COMIC_LANDMARK = (By.XPATH, "//main[@id='main' and @class='lzCntnr lzCntnr--episode']")
# Comic page in 'My Library' has finished rendering
LIBRARY_LANDMARK = (By.XPATH, "//ul[@id='library-episode-list' and @class='epsList']")
# Root of the cut images in the viewer
SCROLL_LIST = (By.ID, "scroll-list")
SCROLL_LIST_ID = "scroll-list"

LOGIN_USERNAME = (By.ID, "login-email")
LOGIN_PASSWORD = (By.ID, "login-password")
LOGIN_SUBMIT = (By.CSS_SELECTOR, "form#login-form button[type='submit']")
CAPTCHA_MARKERS = ("g-recaptcha", "recaptcha/api", "captcha-container")

PRODUCT_STORAGE_KEY = "product"
STORE_PRODUCT_SCRIPT = f"localStorage.setItem('{PRODUCT_STORAGE_KEY}', JSON.stringify(window.__LZ_PRODUCT__.product));"
TOKEN_SCRIPT = "return window.__LZ_CONFIG__ ? window.__LZ_CONFIG__.token : null;"


class LezhinParser(BaseParser):
    def parse_product(self, json_text: str, expired: bool = False) -> Product:
        return Product.from_json(json_text, expired=expired)

    def count_cuts(self, html_source: str) -> int:
        """
        Counts content images in the viewer.

        The front and back of the images are cover or warning images::

            <div class="cut cutLicense" data-cut-index="1" data-cut-type="top"></div>
            <div class="cut" data-cut-index="2" data-cut-type="cut"></div>
            <div class="cut cutLicense" data-cut-index="14" data-cut-type="bottom"></div>

        Only a tag with class 'cut' but not 'cutLicense', and data-cut-type 'cut'
        holds a downloadable image.
        """
        if not html_source:
            return 0
        soup = BeautifulSoup(html_source, 'html.parser')
        scroll_list = soup.find(id=SCROLL_LIST_ID)
        if scroll_list is None:
            return 0

        count = 0
        for div in scroll_list.find_all('div'):
            classes = div.get('class') or []
            if 'cut' not in classes or 'cutLicense' in classes:
                continue
            if not div.has_attr('data-cut-index'):
                continue
            if div.get('data-cut-type') == 'cut':
                count += 1
        return count

    def is_verification_page(self, current_url: str, html_source: Optional[str]) -> bool:
        if "captcha" in (current_url or "").lower():
            return True
        if html_source and any(marker in html_source for marker in CAPTCHA_MARKERS):
            return True
        return False
