# ABOUTME: API package for talking to the Shamela books and master-patch endpoints.
# ABOUTME: Exports the client, its HTTP transport protocol, and the errors they raise.

from shamela.api.archive import ArchiveError
from shamela.api.client import ShamelaClient
from shamela.api.http import HttpClient, ShamelaFetchError, ShamelaHttpClient

__all__ = [
    "ArchiveError",
    "HttpClient",
    "ShamelaClient",
    "ShamelaFetchError",
    "ShamelaHttpClient",
]
