"""httplens package root."""

from httplens.exceptions import HttpLensError, UrlRejected
from httplens.parser import HttpMethod, RequestDescriptor, parse_requests

__all__ = [
    "__version__",
    "HttpLensError",
    "HttpMethod",
    "RequestDescriptor",
    "UrlRejected",
    "parse_requests",
]

__version__ = "0.1.0"
