import logging
from typing import Optional
from urllib.parse import urljoin

from ..config import ConfigKey, ConfigReader, get_config
from ..driver.session import session_registry
from ..errors import SessionNotBound
from ..utils import waits

logger = logging.getLogger(__name__)


class BasePage:
    """
    Base class for page objects.

    The page is bound to the browser session of the thread that creates it:

        class LoginPage(BasePage):
            USERNAME = (By.ID, "username")

            def login(self, user):
                self.find(self.USERNAME).send_keys(user)
    """

    def __init__(self, driver=None, config: Optional[ConfigReader] = None):
        self.driver = driver if driver is not None else session_registry.driver
        if self.driver is None:
            raise SessionNotBound(
                f"{type(self).__name__} requires a browser session; "
                "use the 'driver' fixture or session_registry.init() first"
            )
        self.config = config or get_config()

    @property
    def base_url(self) -> str:
        return self.config.require(ConfigKey.BASEURL)

    def open(self, path: str = ""):
        url = urljoin(self.base_url.rstrip("/") + "/", path.lstrip("/"))
        logger.info(f"Opening {url}")
        self.driver.get(url)
        return self

    def find(self, locator):
        return self.driver.find_element(*locator)

    def find_all(self, locator):
        return self.driver.find_elements(*locator)

    def wait_visible(self, locator, timeout: Optional[float] = None):
        return waits.wait_for_visibility(self.driver, locator, timeout)

    @property
    def title(self) -> str:
        return self.driver.title
