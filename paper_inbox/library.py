"""Ingest papers into the papis library from arXiv, ACL or BibTeX."""

from __future__ import annotations

import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

import requests

from paper_inbox.arxiv_ids import (
    abs_url_for,
    arxiv_id_from_url,
    base_id_from_versioned,
    is_valid_base_id,
)
from paper_inbox.config import InboxConfig
from paper_inbox.external import run_tool

LOGGER = logging.getLogger(__name__)

Runner = Callable[[Sequence[str]], None]


@dataclass(frozen=True)
class AclUrls:
    """Sibling URLs for one ACL Anthology paper."""

    base: str
    pdf: str
    bib: str


def acl_urls(url: str) -> AclUrls:
    """Normalize an ACL Anthology URL and derive its PDF and BibTeX URLs.

    Args:
        url: Landing page or PDF URL, with or without a trailing slash.
    Returns:
        AclUrls for the paper.
    Raises:
        ValueError: If the URL is empty after normalization.
    """

    base = url.strip().rstrip("/")
    if base.lower().endswith(".pdf"):
        base = base[: -len(".pdf")]
    if not base:
        raise ValueError(f"Cannot derive ACL URLs from {url!r}")
    return AclUrls(base=base, pdf=f"{base}.pdf", bib=f"{base}.bib")


def _library_add(config: InboxConfig, *args: str) -> list[str]:
    return [*config.library_command, "add", *args]


def _download_file(
    url: str,
    dest_path: Path,
    timeout: int,
    *,
    user_agent: str,
    http_get: Callable[..., requests.Response] | None = None,
) -> None:
    """Download a URL to the destination path.

    Args:
        url: URL to fetch.
        dest_path: Destination file.
        timeout: Request timeout in seconds.
        user_agent: User-Agent header value.
        http_get: Optional HTTP GET function for dependency injection.
    Raises:
        requests.RequestException: If the request fails.
        OSError: If file writes fail.
    """

    http_get = http_get or requests.get
    LOGGER.debug("Fetching %s", url)
    with http_get(
        url,
        stream=True,
        timeout=timeout,
        headers={"User-Agent": user_agent},
    ) as response:
        response.raise_for_status()
        tmp_path = dest_path.with_suffix(f"{dest_path.suffix}.part")
        try:
            with tmp_path.open("wb") as handle:
                for chunk in response.iter_content(chunk_size=1024 * 1024):
                    if chunk:
                        handle.write(chunk)
            tmp_path.replace(dest_path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink(missing_ok=True)


def ingest_from_arxiv(
    pdf_url: str,
    *,
    config: InboxConfig,
    run: Runner | None = None,
) -> str:
    """Add an arXiv paper to the library by its abstract page.

    Args:
        pdf_url: arXiv PDF (or abstract) URL.
        config: Runtime configuration.
        run: Optional command runner for testing.
    Returns:
        The abstract-page URL handed to the library tool.
    Raises:
        ValueError: If no identifier can be derived from the URL.
        subprocess.CalledProcessError: If the library tool fails.
    """

    arxiv_id = arxiv_id_from_url(pdf_url)
    if not is_valid_base_id(base_id_from_versioned(arxiv_id)):
        LOGGER.warning("%r does not look like an arXiv ID; trying anyway.", arxiv_id)
    target = abs_url_for(arxiv_id)
    (run or run_tool)(_library_add(config, "--batch", "--from", "arxiv", target))
    return target


def ingest_from_bibtex(
    pdf_path: Path,
    bib_path: Path,
    *,
    config: InboxConfig,
    run: Runner | None = None,
) -> None:
    """Add a PDF to the library using a local BibTeX file.

    Raises:
        subprocess.CalledProcessError: If the library tool fails.
    """

    (run or run_tool)(
        _library_add(config, "--from", "bibtex", str(bib_path), str(pdf_path))
    )


def ingest_from_acl(
    url: str,
    *,
    config: InboxConfig,
    run: Runner | None = None,
    http_get: Callable[..., requests.Response] | None = None,
    tmp_root: Path | None = None,
) -> AclUrls:
    """Download an ACL Anthology paper with its BibTeX and add it to the library.

    Args:
        url: ACL Anthology landing page or PDF URL.
        config: Runtime configuration.
        run: Optional command runner for testing.
        http_get: Optional HTTP GET function for testing.
        tmp_root: Optional parent for the temporary download directory.
    Returns:
        The derived ACL URLs.
    Raises:
        requests.RequestException: If either download fails.
        subprocess.CalledProcessError: If the library tool fails.
    Edge cases:
        The temporary directory is removed on every exit path.
    """

    urls = acl_urls(url)
    with tempfile.TemporaryDirectory(prefix="paper-inbox-acl-", dir=tmp_root) as tmp:
        workdir = Path(tmp)
        pdf_path = workdir / "paper.pdf"
        bib_path = workdir / "paper.bib"
        for source, dest in ((urls.pdf, pdf_path), (urls.bib, bib_path)):
            _download_file(
                source,
                dest,
                config.http_timeout,
                user_agent=config.user_agent,
                http_get=http_get,
            )
        ingest_from_bibtex(pdf_path, bib_path, config=config, run=run)
    return urls
