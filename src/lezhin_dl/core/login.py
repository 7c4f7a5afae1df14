from selenium.common.exceptions import WebDriverException

from lezhin_dl.core import urls
from lezhin_dl.core.browser import Browser
from lezhin_dl.core.exceptions import AuthenticationError
from lezhin_dl.data.models import Credentials
from lezhin_dl.parser import lezhin
from lezhin_dl.parser.lezhin import LezhinParser
from lezhin_dl.utils.logger import logger


class TokenResolver:
    """
    Logs in through the browser and reads the access token.
    Cookies of the session stay in the browser for later navigation.
    No retry here: a failed login ends the run.
    """

    def __init__(self, browser: Browser, language: str, parser: LezhinParser = None):
        self.browser = browser
        self.language = language
        self.parser = parser or LezhinParser()

    def login(self, credentials: Credentials) -> str:
        login_url = urls.login_url(self.language)
        logger.info(f"Login as '{credentials.username}'")
        try:
            self.browser.navigate(login_url)
            self.browser.fill(lezhin.LOGIN_USERNAME, credentials.username)
            self.browser.fill(lezhin.LOGIN_PASSWORD, credentials.password)
            self.browser.click(lezhin.LOGIN_SUBMIT)

            current_url = self.browser.current_url()
            if self.parser.is_verification_page(current_url, self.browser.page_source()):
                raise AuthenticationError("Login is blocked by a verification page (CAPTCHA)")
            if urls.same_path(current_url, login_url):
                raise AuthenticationError(f"Failed to login as '{credentials.username}': check username and password")

            token = self.browser.execute_script(lezhin.TOKEN_SCRIPT)
        except WebDriverException as e:
            raise AuthenticationError(f"Failed to reach login page: {e.msg or e}") from e

        if not token:
            raise AuthenticationError("Access token is not found after login")
        logger.debug("Access token obtained")
        return token
