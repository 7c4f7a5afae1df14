import threading
from typing import Callable, Optional, Tuple

from seleniumbase import Driver
from selenium.webdriver.support.ui import WebDriverWait
from selenium.webdriver.support import expected_conditions as EC

from lezhin_dl.utils.logger import logger

Locator = Tuple[str, str]
DEFAULT_TIMEOUT = 15


class Browser:
    """
    Exclusively owned handle to a single browser session.

    The driver is created on first use and every call goes through one lock,
    so only one navigation or extraction is in flight at a time. ``quit()`` is
    idempotent and must be reached from every exit path of the owner.
    """

    def __init__(self, headless: bool = True, driver_factory: Optional[Callable] = None):
        self.headless = headless
        self._driver_factory = driver_factory or self._create_driver
        self._driver = None
        self._lock = threading.RLock()
        self._closed = False

    def _create_driver(self):
        return Driver(uc=True, headless=self.headless, incognito=True)

    @property
    def driver(self):
        with self._lock:
            if self._closed:
                raise RuntimeError("Browser has already been closed")
            if self._driver is None:
                mode = "Headless" if self.headless else "Normal"
                logger.info(f"Initializing Browser ({mode} mode)...")
                self._driver = self._driver_factory()
            return self._driver

    @property
    def is_running(self) -> bool:
        return self._driver is not None

    def navigate(self, url: str):
        with self._lock:
            logger.debug(f"Navigate: {url}")
            self.driver.get(url)

    def current_url(self) -> str:
        with self._lock:
            return self.driver.current_url

    def page_source(self) -> str:
        with self._lock:
            return self.driver.page_source

    def wait_for_visible(self, locator: Locator, timeout: int = DEFAULT_TIMEOUT):
        """Raises selenium's TimeoutException when the element stays hidden."""
        with self._lock:
            logger.debug(f"Wait up to {timeout} sec for {locator[1]}")
            return WebDriverWait(self.driver, timeout).until(EC.visibility_of_element_located(locator))

    def fill(self, locator: Locator, text: str):
        with self._lock:
            element = self.driver.find_element(*locator)
            element.clear()
            element.send_keys(text)

    def click(self, locator: Locator):
        with self._lock:
            self.driver.find_element(*locator).click()

    def execute_script(self, script: str, *args):
        with self._lock:
            return self.driver.execute_script(script, *args)

    def read_local_storage(self, key: str) -> Optional[str]:
        return self.execute_script("return window.localStorage.getItem(arguments[0]);", key)

    def quit(self):
        with self._lock:
            self._closed = True
            if self._driver is None:
                return
            logger.info("Closing browser...")
            try:
                self._driver.quit()
            except Exception as e:
                logger.warning(f"Error while closing browser: {e}")
            finally:
                self._driver = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, tb):
        self.quit()
