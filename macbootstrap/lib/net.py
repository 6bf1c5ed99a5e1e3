from __future__ import annotations

import logging
import os
import re
import shutil
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

import requests

from .command import run_cmd

logger = logging.getLogger(__name__)

URL_RE = re.compile(r"^(https?|ftp|file)://[-A-Za-z0-9+&@#/%?=~_|!:,.;]*[-A-Za-z0-9+&@#/%=~_|]$")

CHUNK_SIZE = 1024 * 1024


def is_valid_url(value: str) -> bool:
    return bool(URL_RE.fullmatch(value or ""))


def fetch_text(url: str, *, timeout: Optional[float] = None) -> str:
    """GET ``url`` and return the body. Raises requests.RequestException."""

    r = requests.get(url, timeout=timeout)
    r.raise_for_status()
    return r.text


def download_file(url: str, dest_path: str, *, timeout: Optional[float] = None, dry_run: bool = False) -> bool:
    """Fetch ``url`` into ``dest_path``. Returns True on success.

    http(s) goes through requests, file:// is a local copy and anything
    else (ftp) is handed to curl.
    """

    logger.info("Downloading %s to %s", url, dest_path)
    if dry_run:
        return True

    scheme = urlparse(url).scheme.lower()
    tmp_path = dest_path + ".part"

    try:
        if scheme in {"http", "https"}:
            with requests.get(url, stream=True, timeout=timeout) as r:
                r.raise_for_status()
                with open(tmp_path, "wb") as f:
                    for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)
        elif scheme == "file":
            shutil.copyfile(unquote(urlparse(url).path), tmp_path)
        else:
            r = run_cmd(["curl", "-fsSL", "-o", tmp_path, url], check=False)
            if not r.ok:
                logger.error("curl failed for %s", url, extra={"status": r.returncode})
                return False
        os.replace(tmp_path, dest_path)
    except (requests.RequestException, OSError) as e:
        logger.error("Download error for %s: %s", url, e)
        return False
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)

    return Path(dest_path).is_file()
