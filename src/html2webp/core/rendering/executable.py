"""
Browser Executable Resolution
=============================

Locates the headless Chromium binary used for rendering. Three sources are
supported, selected by configuration:

- ``remote``: a version-pinned archive (``chromium_pack_url``) downloaded and
  extracted once per process, at cold start. Brotli-compressed members
  (``chromium.br``, ``fonts.tar.br``) are expanded after extraction
- ``local``: a binary already present on disk (``chromium_executable_path``)
- ``bundled``: the Chromium build installed by Playwright itself
"""

import asyncio
import shutil
import stat
import tarfile
import tempfile
import uuid
import zipfile
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import aiohttp
import brotli

from html2webp.config.logging import get_logger
from html2webp.config.settings import Settings, get_settings
from html2webp.core.exceptions import BrowserExecutableError

logger = get_logger(__name__)

BINARY_NAMES = ("chromium", "chrome", "headless_shell", "chromium-browser")
DOWNLOAD_CHUNK_SIZE = 1024 * 1024
INSTALL_MARKER = ".html2webp-installed"


class ExecutableResolver:
    """Resolve and memoize the Chromium executable path for this process."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.logger = logger.bind(component="executable_resolver")
        self._resolved: Optional[Path] = None
        self._lock = asyncio.Lock()

    @property
    def source(self) -> str:
        return self.settings.executable_source

    async def resolve(self) -> Optional[Path]:
        """
        Return the executable path, or None to use Playwright's bundled build.

        Raises:
            BrowserExecutableError: If the configured executable is unavailable
        """
        if self.source == "bundled":
            return None

        if self.source == "local":
            path = Path(self.settings.chromium_executable_path)
            if not path.is_file():
                raise BrowserExecutableError(f"Chromium executable not found at {path}")
            return path

        async with self._lock:
            if self._resolved is None or not self._resolved.is_file():
                self._resolved = await self._install_remote_pack(self.settings.chromium_pack_url)
            return self._resolved

    async def _install_remote_pack(self, url: str) -> Path:
        install_dir = self.settings.chromium_cache_dir
        cached = await asyncio.to_thread(_find_installed_binary, install_dir)
        if cached is not None:
            self.logger.info("Using cached Chromium pack", path=str(cached))
            return cached

        self.logger.info("Downloading Chromium pack", url=url, install_dir=str(install_dir))
        archive_name = Path(urlparse(url).path).name or "chromium-pack.tar"
        staging_dir = install_dir.with_name(f".{install_dir.name}.staging-{uuid.uuid4().hex}")

        try:
            with tempfile.TemporaryDirectory(prefix="html2webp-pack-") as tmpdir:
                archive_path = Path(tmpdir) / archive_name
                await _download_file(url, archive_path, self.settings.pack_download_timeout)
                extracted_root = Path(tmpdir) / "extracted"
                extracted_root.mkdir(parents=True, exist_ok=True)
                await asyncio.to_thread(_extract_archive, archive_path, extracted_root)
                await asyncio.to_thread(_expand_brotli_members, extracted_root)

                candidate = await asyncio.to_thread(_find_binary, extracted_root)
                if candidate is None:
                    raise BrowserExecutableError(
                        f"No Chromium binary ({', '.join(BINARY_NAMES)}) found in {url}"
                    )

                # Chromium needs its sibling resources (locales, .pak files)
                await asyncio.to_thread(_install_tree, candidate, staging_dir, install_dir)
        except (
            OSError,
            aiohttp.ClientError,
            asyncio.TimeoutError,
            zipfile.BadZipFile,
            tarfile.TarError,
            brotli.error,
        ) as exc:
            raise BrowserExecutableError(f"Unable to install Chromium pack: {exc}") from exc
        finally:
            await asyncio.to_thread(shutil.rmtree, staging_dir, True)

        target = install_dir / candidate.name
        self.logger.info("Chromium pack installed", path=str(target))
        return target


async def _download_file(url: str, destination: Path, timeout_seconds: float) -> None:
    timeout = aiohttp.ClientTimeout(total=timeout_seconds, connect=min(10.0, timeout_seconds))
    async with aiohttp.ClientSession(timeout=timeout) as session:
        async with session.get(url) as response:
            response.raise_for_status()
            handle = await asyncio.to_thread(destination.open, "wb")
            try:
                async for chunk in response.content.iter_chunked(DOWNLOAD_CHUNK_SIZE):
                    await asyncio.to_thread(handle.write, chunk)
            finally:
                await asyncio.to_thread(handle.close)


def _extract_archive(archive_path: Path, destination: Path) -> None:
    if archive_path.suffix == ".zip":
        with zipfile.ZipFile(archive_path) as archive:
            archive.extractall(destination)
        return
    with tarfile.open(archive_path, "r:*") as archive:
        archive.extractall(destination, filter="data")


def _expand_brotli_members(root: Path) -> None:
    """Decompress ``*.br`` files in place; ``*.tar.br`` layers are unpacked too."""
    for compressed in list(root.rglob("*.br")):
        if not compressed.is_file():
            continue
        target = compressed.with_suffix("")
        decompressor = brotli.Decompressor()
        with compressed.open("rb") as source, target.open("wb") as handle:
            while chunk := source.read(DOWNLOAD_CHUNK_SIZE):
                handle.write(decompressor.process(chunk))
        if not decompressor.is_finished():
            raise brotli.error(f"Truncated brotli stream: {compressed.name}")
        compressed.unlink()

        if target.suffix == ".tar":
            with tarfile.open(target, "r:*") as archive:
                archive.extractall(target.parent, filter="data")
            target.unlink()


def _install_tree(candidate: Path, staging_dir: Path, install_dir: Path) -> None:
    """Copy the binary's directory into place; the marker is written last."""
    shutil.copytree(candidate.parent, staging_dir)
    binary = staging_dir / candidate.name
    binary.chmod(binary.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    (staging_dir / INSTALL_MARKER).write_text(candidate.name)

    if install_dir.exists():
        shutil.rmtree(install_dir)
    staging_dir.rename(install_dir)


def _find_installed_binary(install_dir: Path) -> Optional[Path]:
    marker = install_dir / INSTALL_MARKER
    if not marker.is_file():
        return None
    binary = install_dir / marker.read_text().strip()
    return binary if binary.is_file() else None


def _find_binary(root: Path) -> Optional[Path]:
    if not root.is_dir():
        return None
    for name in BINARY_NAMES:
        for candidate in root.rglob(name):
            if candidate.is_file():
                return candidate
    return None


_resolver: Optional[ExecutableResolver] = None


def get_executable_resolver() -> ExecutableResolver:
    """Get the process-wide executable resolver."""
    global _resolver
    if _resolver is None:
        _resolver = ExecutableResolver()
    return _resolver


def reset_executable_resolver() -> None:
    """Forget the memoized resolver (settings reload, tests)."""
    global _resolver
    _resolver = None
