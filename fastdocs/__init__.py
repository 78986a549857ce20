"""fastdocs: navigation, link checking and live preview staging for markdown trees."""

from .config import SiteConfig, load_config
from .links import LinkChecker, LinkReport
from .navigation import SidebarCompiler

__version__ = "0.1.0"

__all__ = ["LinkChecker", "LinkReport", "SidebarCompiler", "SiteConfig", "load_config"]
