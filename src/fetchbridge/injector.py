"""Script-injection (JSONP) primitive backed by a Chromium page."""

from __future__ import annotations

import itertools
import json
import logging
import threading
from pathlib import Path
from typing import Any, Callable
from urllib.parse import quote

from DrissionPage import ChromiumOptions, ChromiumPage

from .exceptions import BrowserInitError, ScriptInjectionError

logger = logging.getLogger(__name__)

# Type alias for page factory
PageFactory = Callable[[ChromiumOptions], ChromiumPage]

# Shared by all injectors so global callback names never collide in one page.
_callback_ids = itertools.count()


class BrowserScriptInjector:
    """Loads JSONP endpoints by injecting ``<script>`` tags into a browser page.

    The endpoint is asked to wrap its payload in a call to a uniquely named
    global function; the payload handed to that function is the result.
    The browser is started on first use.

    Attributes:
        profile_dir: Path to the browser profile directory.
        headless: Whether the browser runs in headless mode.
        callback_param: Query parameter carrying the callback name.
        callback_prefix: Prefix of generated callback names.
        timeout: Seconds to wait for the script to call back.
    """

    def __init__(
        self,
        profile_dir: str | Path = "./browser_data",
        headless: bool = True,
        callback_param: str = "callback",
        callback_prefix: str = "__jp",
        timeout: float = 60.0,
        page_factory: PageFactory | None = None,
    ) -> None:
        """Initialize the injector.

        Args:
            profile_dir: Directory path for the user data profile.
            headless: Run browser in headless mode.
            callback_param: Name of the query parameter for the callback name.
            callback_prefix: Prefix for generated callback names.
            timeout: Seconds before a script that never calls back is abandoned.
            page_factory: Optional callable to create browser pages (for testing/DI).
        """
        self.profile_dir = Path(profile_dir)
        self.headless = headless
        self.callback_param = callback_param
        self.callback_prefix = callback_prefix
        self.timeout = timeout
        self._page_factory = page_factory
        self._page: ChromiumPage | None = None
        # Guards lazy browser start-up and shutdown.
        self._lock = threading.Lock()

    def _init_browser(self) -> ChromiumPage:
        """Start the DrissionPage browser instance.

        Raises:
            BrowserInitError: If initialization fails.
        """
        try:
            options = ChromiumOptions()
            options.set_user_data_path(str(self.profile_dir))
            options.headless(self.headless)

            if self._page_factory:
                return self._page_factory(options)
            return ChromiumPage(options)
        except Exception as e:
            # Catching generic Exception because DrissionPage can raise various errors
            raise BrowserInitError(f"Failed to initialize browser: {e}") from e

    def build_url(self, url: str, callback_name: str) -> str:
        """Append the callback parameter to ``url``."""
        joiner = "&" if "?" in url else "?"
        target = f"{url}{joiner}{self.callback_param}={quote(callback_name, safe='')}"
        return target.replace("?&", "?")

    def __call__(self, url: str) -> Any:
        """Load ``url`` as a script and return the payload it calls back with.

        Raises:
            BrowserInitError: If the browser cannot be started.
            ScriptInjectionError: If the script fails to load, never calls
                back, or the page returns something unexpected.
        """
        callback_name = f"{self.callback_prefix}{next(_callback_ids)}"
        timeout_ms = int(self.timeout * 1000)

        js_script = f"""
            new Promise((resolve) => {{
                const name = {json.dumps(callback_name)};
                const script = document.createElement('script');
                let timer = null;
                const cleanup = () => {{
                    if (script.parentNode) script.parentNode.removeChild(script);
                    window[name] = () => {{}};
                    if (timer) clearTimeout(timer);
                }};
                if ({timeout_ms}) {{
                    timer = setTimeout(() => {{
                        cleanup();
                        resolve({{ error: 'Timeout' }});
                    }}, {timeout_ms});
                }}
                window[name] = (data) => {{
                    cleanup();
                    resolve({{ data: data }});
                }};
                script.onerror = () => {{
                    cleanup();
                    resolve({{ error: 'Script load failed' }});
                }};
                script.src = {json.dumps(self.build_url(url, callback_name))};
                (document.head || document.documentElement).appendChild(script);
            }})
        """

        logger.debug("Injecting script for %s as %s", url, callback_name)

        with self._lock:
            if self._page is None:
                self._page = self._init_browser()
            page = self._page

        # Callback names are unique, so evaluations may overlap on one page.
        cdp_res = page.run_cdp(
            "Runtime.evaluate",
            expression=js_script,
            awaitPromise=True,
            returnByValue=True,
            includeCommandLineAPI=False,
        )

        if "exceptionDetails" in cdp_res:
            raise ScriptInjectionError(f"JS Execution Error: {cdp_res['exceptionDetails']}")

        result_value = cdp_res.get("result", {}).get("value")
        if not isinstance(result_value, dict):
            raise ScriptInjectionError(f"Unexpected JS result type: {type(result_value)}")

        if "error" in result_value:
            raise ScriptInjectionError(f"JSONP request to {url} failed: {result_value['error']}")

        return result_value.get("data")

    def close(self) -> None:
        """Close the browser instance, if one was started."""
        with self._lock:
            if self._page:
                self._page.quit()
                self._page = None
