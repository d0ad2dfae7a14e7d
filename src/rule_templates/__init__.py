"""Discovery and retrieval of rule templates hosted in remote repositories."""
from .assembler import TemplateAssembler
from .cache import DiscoveryCache
from .client import ContentClient
from .errors import InvalidLocatorError
from .errors import MalformedResponseError
from .errors import NetworkError
from .errors import NotFoundError
from .errors import RateLimitedError
from .errors import TemplateSourceError
from .locator import RepositoryLocator
from .locator import parse_locator
from .metadata import extract_metadata
from .models import DirectoryEntry
from .models import Template
from .ratelimit import RateLimitGuard

__all__ = [
    "ContentClient",
    "DirectoryEntry",
    "DiscoveryCache",
    "InvalidLocatorError",
    "MalformedResponseError",
    "NetworkError",
    "NotFoundError",
    "RateLimitGuard",
    "RateLimitedError",
    "RepositoryLocator",
    "Template",
    "TemplateAssembler",
    "TemplateSourceError",
    "extract_metadata",
    "parse_locator",
]
