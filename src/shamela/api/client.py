# ABOUTME: High-level Shamela API client: fetches release metadata, downloads and assembles data.
# ABOUTME: Combines the HTTP transport, archive extraction, and the book/catalog assemblers.

import logging
import shutil
import tempfile
from pathlib import Path
from urllib.parse import urlsplit

from shamela.api.archive import download_and_extract, first_sqlite_member
from shamela.api.http import (
    HttpClient,
    ShamelaFetchError,
    ShamelaHttpClient,
    fix_https_protocol,
    redact_url,
)
from shamela.config import ShamelaConfig
from shamela.db.book import assemble_book, write_book_database
from shamela.db.master import assemble_catalog, resolve_master_sources, write_master_database
from shamela.formats.jsonfile import write_json
from shamela.types import BookData, BookMetadataResponse, MasterData, MasterMetadataResponse

logger = logging.getLogger(__name__)

DEFAULT_MASTER_METADATA_VERSION = 0
_SQLITE_OUTPUTS = (".db", ".sqlite")


def _output_kind(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix == ".json":
        return "json"
    if suffix in _SQLITE_OUTPUTS:
        return "sqlite"
    raise ValueError(f"Unsupported output extension {path.suffix!r}; use .json, .db or .sqlite")


class ShamelaClient:
    """Client for the Shamela books and master-patch endpoints.

    Uses dependency-injected HttpClient for testability; defaults to a
    ShamelaHttpClient.
    """

    def __init__(self, config: ShamelaConfig, http: HttpClient | None = None) -> None:
        self._config = config
        self._owned_http: ShamelaHttpClient | None = None
        if http is None:
            http = self._owned_http = ShamelaHttpClient()
        self._http = http

    def close(self) -> None:
        """Close the HTTP client if this instance created it. Injected clients stay open."""
        if self._owned_http is not None:
            self._owned_http.close()

    def __enter__(self) -> "ShamelaClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def get_book_metadata(self, book_id: int, major: int = 0, minor: int = 0) -> BookMetadataResponse:
        """Ask the API where a book's release and patch archives live.

        Raises:
            ConfigError: If the books endpoint or API key is not configured.
            ShamelaFetchError: If the request fails.
        """
        endpoint = self._config.require("books_endpoint").rstrip("/")
        url = f"{endpoint}/{book_id}"
        params = {
            "api_key": self._config.require("api_key"),
            "major_release": str(major),
            "minor_release": str(minor),
        }
        logger.info("Fetching book %d metadata from %s", book_id, redact_url(url))
        data = self._http.get_json(url, params=params)

        try:
            metadata = BookMetadataResponse(
                major_release=int(data["major_release"]),
                major_release_url=fix_https_protocol(data["major_release_url"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ShamelaFetchError(f"Unexpected book metadata response: {data!r}") from exc
        if data.get("minor_release_url"):
            metadata.minor_release_url = fix_https_protocol(data["minor_release_url"])
            metadata.minor_release = data.get("minor_release")
        return metadata

    def get_master_metadata(self, version: int = DEFAULT_MASTER_METADATA_VERSION) -> MasterMetadataResponse:
        """Ask the API where the master catalog archive for ``version`` lives.

        Raises:
            ConfigError: If the master endpoint or API key is not configured.
            ShamelaFetchError: If the request fails.
        """
        url = self._config.require("master_patch_endpoint")
        params = {"api_key": self._config.require("api_key"), "version": str(version)}
        logger.info("Fetching master database patch link from %s", redact_url(url))
        data = self._http.get_json(url, params=params)

        try:
            return MasterMetadataResponse(
                url=fix_https_protocol(data["patch_url"]),
                version=int(data["version"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ShamelaFetchError(f"Unexpected master metadata response: {data!r}") from exc

    def get_cover_url(self, book_id: int) -> str:
        """Cover image URL on the API host."""
        host = urlsplit(self._config.require("master_patch_endpoint")).netloc
        return f"https://{host}/covers/{book_id}.jpg"

    def download_book(
        self,
        book_id: int,
        output_path: Path,
        metadata: BookMetadataResponse | None = None,
    ) -> Path:
        """Download a book, apply its patch, and write ``.json``, ``.db`` or ``.sqlite`` output."""
        kind = _output_kind(output_path)
        metadata = metadata or self.get_book_metadata(book_id)
        work_dir = Path(tempfile.mkdtemp(prefix="shamela_book_"))
        try:
            base_path, patch_path = self._fetch_book_sources(metadata, work_dir)
            if kind == "json":
                write_json(assemble_book(base_path, patch_path).to_dict(), output_path)
            else:
                write_book_database(base_path, patch_path, output_path)
        finally:
            shutil.rmtree(work_dir, ignore_errors=True)
        logger.info("Wrote book %d to %s", book_id, output_path)
        return output_path

    def download_master_database(
        self,
        output_path: Path,
        metadata: MasterMetadataResponse | None = None,
    ) -> Path:
        """Download the master catalog and write ``.json``, ``.db`` or ``.sqlite`` output."""
        kind = _output_kind(output_path)
        data = self._assemble_master(metadata)
        if kind == "json":
            write_json(data.to_dict(), output_path)
        else:
            write_master_database(data, output_path)
        logger.info("Wrote master catalog to %s", output_path)
        return output_path

    def get_book(self, book_id: int, metadata: BookMetadataResponse | None = None) -> BookData:
        """Download and assemble a book in memory."""
        metadata = metadata or self.get_book_metadata(book_id)
        work_dir = Path(tempfile.mkdtemp(prefix="shamela_book_"))
        try:
            return assemble_book(*self._fetch_book_sources(metadata, work_dir))
        finally:
            shutil.rmtree(work_dir, ignore_errors=True)

    def get_master(self, metadata: MasterMetadataResponse | None = None) -> MasterData:
        """Download and assemble the master catalog in memory."""
        return self._assemble_master(metadata)

    def _fetch_book_sources(
        self, metadata: BookMetadataResponse, work_dir: Path
    ) -> tuple[Path, Path | None]:
        base = first_sqlite_member(
            download_and_extract(self._http, metadata.major_release_url, work_dir / "major")
        )
        patch = None
        if metadata.minor_release_url:
            patch = first_sqlite_member(
                download_and_extract(self._http, metadata.minor_release_url, work_dir / "minor")
            )
        return base, patch

    def _assemble_master(self, metadata: MasterMetadataResponse | None) -> MasterData:
        metadata = metadata or self.get_master_metadata()
        work_dir = Path(tempfile.mkdtemp(prefix="shamela_master_"))
        try:
            paths = download_and_extract(self._http, metadata.url, work_dir)
            sources = resolve_master_sources(paths)
            return assemble_catalog(
                sources["author"], sources["book"], sources["category"], version=metadata.version
            )
        finally:
            shutil.rmtree(work_dir, ignore_errors=True)
