#
# Copyright 2024 boostx Project Authors. All rights reserved.
# Use of this source code is governed by a MIT-style
# license that can be found at
#
# https://opensource.org/license/MIT
#
# The above copyright notice and this permission
# notice shall be included in all copies or
# substantial portions of the Software.

"""
Download, verify and unpack the Boost source archive.

Mirrors are listed in a LOCATIONS file, one URL template per line, e.g.

    https://archives.boost.io/release/DOTVERSION/source/FILENAME

Mirrors are tried in order until one serves an archive with the expected
SHA-256.
"""

import hashlib
import os
import shutil
import tarfile
from pathlib import Path
from typing import List, Optional

import requests

from boostx.build_scripts.build_config import BuildSettings
from boostx.utils.cmd.cmd_util import exec_command
from boostx.utils.errors import BuildJobFailure, DownloadError

CHUNK_SIZE = 1024 * 1024
REQUEST_TIMEOUT = 60


def file_sha256(path) -> str:
    sha256_hash = hashlib.sha256()
    with open(path, "rb") as f:
        for byte_block in iter(lambda: f.read(CHUNK_SIZE), b""):
            sha256_hash.update(byte_block)
    return sha256_hash.hexdigest()


def mirror_links(locations_text: str, settings: BuildSettings) -> List[str]:
    links = []
    for line in locations_text.splitlines():
        template = line.strip()
        if not template or template.startswith("#"):
            continue
        link = template.replace("DOTVERSION", settings.boost_version)
        link = link.replace("FILENAME", settings.archive_file_name)
        links.append(link)
    return links


class ArchiveFetcher:
    """Fetch ``boost_X_Y_Z.tar.bz2`` into a work directory."""

    def __init__(self, settings: BuildSettings, work_dir, session: Optional[requests.Session] = None):
        self.settings = settings
        self.work_dir = Path(work_dir)
        self.session = session or requests.Session()

    @property
    def archive_path(self) -> Path:
        return self.work_dir / self.settings.archive_file_name

    def is_valid(self, path) -> bool:
        return file_sha256(path) == self.settings.boost_sha256

    def load_locations(self) -> List[str]:
        try:
            response = self.session.get(self.settings.locations_url, timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
        except requests.RequestException as e:
            raise DownloadError(
                f"Failed to download the LOCATIONS file {self.settings.locations_url}: {e}"
            ) from e
        return mirror_links(response.text, self.settings)

    def download(self, link) -> bool:
        """Download link to the archive path; False if the request failed."""
        try:
            with self.session.get(link, stream=True, allow_redirects=True, timeout=REQUEST_TIMEOUT) as response:
                response.raise_for_status()
                with open(self.archive_path, "wb") as f:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)
        except requests.RequestException as e:
            print(f"download from {link} failed: {e}")
            if self.archive_path.exists():
                self.archive_path.unlink()
            return False
        return True

    def fetch(self) -> bool:
        """
        Make sure a verified archive exists.

        Returns:
            bool: True if a new archive was downloaded, False if the
            existing one was reused

        Raises:
            DownloadError: no mirror served an archive with the expected hash
        """
        if self.archive_path.exists():
            if self.is_valid(self.archive_path):
                return False
            print("Wrong archive hash, trying to reload the archive")
            self.archive_path.unlink()

        for link in self.load_locations():
            print(f"downloading from {link} ...")
            if not self.download(link):
                continue
            file_hash = file_sha256(self.archive_path)
            if file_hash == self.settings.boost_sha256:
                return True
            print(
                f"Wrong archive hash {file_hash}, expected {self.settings.boost_sha256}. "
                "Trying next link to reload the archive."
            )
            self.archive_path.unlink()

        raise DownloadError(f"Failed to download the Boost {self.settings.boost_version}.")


def fetch_boost_archive(settings: BuildSettings, work_dir, session=None) -> bool:
    return ArchiveFetcher(settings, work_dir, session).fetch()


def extract_boost_archive(settings: BuildSettings, work_dir, fresh=False) -> Path:
    """
    Unpack the archive to <work_dir>/boost.

    An existing tree is kept unless a fresh archive was just downloaded.
    """
    work_dir = Path(work_dir)
    boost_dir = work_dir / "boost"
    if fresh and boost_dir.exists():
        shutil.rmtree(boost_dir)
    if boost_dir.exists():
        return boost_dir

    archive = work_dir / settings.archive_file_name
    print(f"extracting {archive.name} ...")
    with tarfile.open(archive, "r:bz2") as tar:
        if hasattr(tarfile, "data_filter"):
            tar.extractall(work_dir, filter="data")
        else:
            tar.extractall(work_dir)
    os.rename(work_dir / settings.boost_name, boost_dir)
    return boost_dir


def bootstrap_boost(boost_dir) -> Path:
    """Run bootstrap.sh unless b2 has already been built."""
    boost_dir = Path(boost_dir)
    b2 = boost_dir / "b2"
    if b2.exists():
        return b2
    print("bootstrapping boost...")
    ret, _ = exec_command(["./bootstrap.sh"], cwd=str(boost_dir), capture_output=False)
    if ret != 0:
        raise BuildJobFailure("bootstrap", f"bootstrap.sh exited with status {ret}")
    return b2


def prepare_boost_sources(settings: BuildSettings, work_dir, session=None) -> Path:
    """Download, unpack and bootstrap Boost; returns the source tree."""
    fresh = fetch_boost_archive(settings, work_dir, session)
    boost_dir = extract_boost_archive(settings, work_dir, fresh=fresh)
    bootstrap_boost(boost_dir)
    return boost_dir
