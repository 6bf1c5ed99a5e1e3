from __future__ import annotations

import logging
import os

from ..errors import RepositoryCloneFailed
from ..lib.assets import remove_path
from ..lib.command import run_cmd
from ..pipeline import RunContext

logger = logging.getLogger(__name__)


class CloneInitRepoStep:
    step_id = "20_clone_init_repo"

    def run(self, ctx: RunContext) -> None:
        s = ctx.settings
        url = s.init_repo_url
        target_dir = s.target_dir

        if not url:
            raise RepositoryCloneFailed("settings.initrepo is not set")

        if os.path.isdir(target_dir):
            logger.warning("Directory '%s' already exists. Deleting...", target_dir)
            remove_path(target_dir, dry_run=ctx.dry_run)

        logger.info("Cloning repository %s to %s ...", url, target_dir)
        r = run_cmd(["git", "clone", url, target_dir], check=False, dry_run=ctx.dry_run)
        if not r.ok:
            logger.error(
                "Failed to clone %s. Please check the URL and your network connection.",
                url,
                extra={"status": r.returncode},
            )
            raise RepositoryCloneFailed(f"git clone {url} failed")

        logger.info("Repository %s successfully cloned into '%s'.", url, target_dir)
