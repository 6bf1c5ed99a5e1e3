from __future__ import annotations

import json
import logging
import os
import re
from typing import Any, Dict

import requests

from ..errors import AssetDownloadFailed, MetadataUnavailable, PayloadMissing
from ..lib.assets import ensure_dir, remove_path
from ..lib.macos import bsdtar_extract, pkgutil_expand
from ..lib.net import download_file, fetch_text
from ..pipeline import RunContext, StepReport

logger = logging.getLogger(__name__)

APP_NAME = "Nextcloud"
PKG_URL_TEMPLATE = "https://github.com/nextcloud-releases/desktop/releases/download/v{version}/Nextcloud-{version}.pkg"
PAYLOAD_REL = "Nextcloud.pkg/Payload"
SCRATCH_DIR_NAME = "output"
DRY_RUN_VERSION = "latest"

_CONTROL_CHARS_RE = re.compile(r"[\x00-\x19]")


def parse_release_version(raw: str) -> str:
    """Turn a release metadata document into the version used in asset names.

    "v3.13.2-rc1" -> "3.13.2_rc1"
    """

    try:
        data: Dict[str, Any] = json.loads(_CONTROL_CHARS_RE.sub("", raw))
    except ValueError as e:
        raise MetadataUnavailable(f"Release metadata is not JSON: {e}") from e

    tag = str((data if isinstance(data, dict) else {}).get("tag_name") or "").strip()
    if not tag:
        raise MetadataUnavailable("Release metadata has no tag_name")

    if tag.startswith("v"):
        tag = tag[1:]
    return tag.replace("\n", "").replace("-", "_")


def package_url(version: str) -> str:
    return PKG_URL_TEMPLATE.format(version=version)


class InstallNextcloudStep:
    """Install the Nextcloud client without admin rights by unpacking its .pkg payload."""

    step_id = "60_install_nextcloud"

    def _fetch_metadata(self, url: str) -> str:
        try:
            raw = fetch_text(url)
        except requests.RequestException as e:
            logger.error("Failed to retrieve release information. Exiting.", extra={"status": 1})
            raise MetadataUnavailable(str(e)) from e
        if not raw.strip():
            logger.error("Failed to retrieve release information. Exiting.", extra={"status": 1})
            raise MetadataUnavailable(f"Empty response from {url}")
        return raw

    def run(self, ctx: RunContext) -> StepReport:
        s = ctx.settings
        report = StepReport(step_id=self.step_id)
        logger.info("Installing %s outside of Homebrew to avoid sudo/admin permissions...", APP_NAME)

        ensure_dir(s.applications_dir, dry_run=ctx.dry_run)

        if ctx.dry_run:
            logger.info("Would query %s for the latest release", s.release_api_url)
            version = DRY_RUN_VERSION
        else:
            version = parse_release_version(self._fetch_metadata(s.release_api_url))
        logger.info("Latest version extracted: %s", version)

        ensure_dir(s.downloads_dir, dry_run=ctx.dry_run)
        pkg_path = os.path.join(s.downloads_dir, f"{APP_NAME}-{version}.pkg")
        scratch = os.path.join(s.downloads_dir, SCRATCH_DIR_NAME)

        logger.info("Downloading %s %s...", APP_NAME, version)
        if not download_file(package_url(version), pkg_path, dry_run=ctx.dry_run):
            logger.error("Failed to download the .pkg file. Exiting.", extra={"status": 1})
            raise AssetDownloadFailed(package_url(version))

        try:
            logger.info("Extracting the .pkg file...")
            # pkgutil refuses to expand into an existing directory.
            remove_path(scratch, dry_run=ctx.dry_run)
            r = pkgutil_expand(pkg_path, scratch, dry_run=ctx.dry_run)
            if not r.ok:
                logger.error("pkgutil could not expand %s", pkg_path, extra={"status": r.returncode})

            payload = os.path.join(scratch, PAYLOAD_REL)
            if not ctx.dry_run and not os.path.isfile(payload):
                logger.error("Payload file not found. Exiting.", extra={"status": 1})
                raise PayloadMissing(payload)

            # The payload is laid out relative to $HOME (Applications/Nextcloud.app).
            r = bsdtar_extract(payload, s.home, dry_run=ctx.dry_run)
            if not r.ok:
                logger.error("Could not extract %s", payload, extra={"status": r.returncode})
                report.failed.append(f"{APP_NAME} {version}")
            else:
                report.ok.append(f"{APP_NAME} {version}")
        finally:
            logger.info("Cleaning up...")
            remove_path(pkg_path, dry_run=ctx.dry_run)
            remove_path(scratch, dry_run=ctx.dry_run)

        logger.info("Installation complete. %s.app is located in %s.", APP_NAME, s.applications_dir)
        return report
