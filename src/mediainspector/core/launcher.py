"""Hand files over to the external re-encode tool."""

import webbrowser
from urllib.parse import quote

from mediainspector.utils.logger import get_logger

logger = get_logger(__name__)


def build_handoff_url(base_url: str, file_path: str) -> str:
    """URL that opens ``file_path`` in the HandBrake web UI.

    Args:
        base_url: HandBrake web UI base URL
        file_path: Path of the file to re-encode

    Returns:
        ``<base>/?source=<url-encoded path>``
    """
    return f"{base_url.rstrip('/')}/?source={quote(file_path, safe='')}"


class ReencodeLauncher:
    """Fire-and-forget handoff of a file to the re-encode tool."""

    def __init__(self, base_url: str, open_browser: bool = True):
        self.base_url = base_url
        self.open_browser = open_browser

    def launch(self, file_path: str) -> str:
        """Open the re-encode tool for a file.

        Returns:
            The handoff URL
        """
        url = build_handoff_url(self.base_url, file_path)
        logger.info("Handing file to re-encode tool", file=file_path, url=url)

        if self.open_browser and not webbrowser.open_new_tab(url):
            logger.warning("No browser available for handoff", url=url)

        return url
