from __future__ import annotations

import logging
import os
import tempfile

from ..errors import RuntimeBootstrapFailed
from ..lib.assets import chmod, ensure_dir, remove_path
from ..lib.brew import brew_install, brew_prefix, brew_update, cask_opts_line, shellenv_line
from ..lib.macos import tar_extract
from ..lib.net import download_file
from ..lib.shellrc import ensure_line_present
from ..pipeline import RunContext, StepReport
from ..state_store import touch_marker

logger = logging.getLogger(__name__)

# Needed by later tooling that queries the YAML document from the shell.
BOOTSTRAP_FORMULAE = ("yq",)


class BootstrapHomebrewStep:
    """Fresh user-local Homebrew on every run; there is no reuse path."""

    step_id = "10_bootstrap_homebrew"

    def _install_runtime(self, ctx: RunContext) -> None:
        s = ctx.settings
        homebrew_dir = s.homebrew_dir

        if os.path.isdir(homebrew_dir):
            logger.info("Removing existing Homebrew directory...")
        remove_path(homebrew_dir, dry_run=ctx.dry_run)
        if os.path.isfile(s.homebrew_marker_file):
            logger.info("Removing existing marker file...")
        remove_path(s.homebrew_marker_file, dry_run=ctx.dry_run)

        logger.info("Installing Homebrew...")
        ensure_dir(homebrew_dir, dry_run=ctx.dry_run)

        if ctx.dry_run:
            archive = os.path.join(tempfile.gettempdir(), "homebrew.tar.gz")
        else:
            fd, archive = tempfile.mkstemp(prefix="homebrew-", suffix=".tar.gz")
            os.close(fd)
        try:
            if not download_file(s.homebrew_tarball_url, archive, dry_run=ctx.dry_run):
                logger.error("Failed to install Homebrew. Exiting...", extra={"status": 1})
                raise RuntimeBootstrapFailed(f"Could not fetch {s.homebrew_tarball_url}")
            r = tar_extract(archive, homebrew_dir, strip_components=1, dry_run=ctx.dry_run)
            if not r.ok:
                logger.error("Failed to install Homebrew. Exiting...", extra={"status": r.returncode})
                raise RuntimeBootstrapFailed(f"Could not extract Homebrew into {homebrew_dir}")
        finally:
            if not ctx.dry_run:
                os.remove(archive)

        logger.info("Homebrew installed successfully.")

    def run(self, ctx: RunContext) -> StepReport:
        s = ctx.settings
        brew = s.brew_cmd
        report = StepReport(step_id=self.step_id)

        self._install_runtime(ctx)

        r = brew_update(brew, dry_run=ctx.dry_run)
        (report.ok if r.ok else report.failed).append("update")
        if not r.ok:
            logger.error("brew update failed", extra={"status": r.returncode})

        for name in BOOTSTRAP_FORMULAE:
            r = brew_install(brew, name, dry_run=ctx.dry_run)
            if r.ok:
                report.ok.append(name)
            else:
                logger.error("Failed to install %s.", name, extra={"status": r.returncode})
                report.failed.append(name)

        ensure_line_present(s.zshenv_file, cask_opts_line(), dry_run=ctx.dry_run)
        ensure_line_present(s.zshenv_file, shellenv_line(brew), dry_run=ctx.dry_run)

        prefix = brew_prefix(brew, dry_run=ctx.dry_run)
        if prefix:
            r = chmod(os.path.join(prefix, "share", "zsh"), "go-w", recursive=True, dry_run=ctx.dry_run)
            if not r.ok:
                logger.error("Could not restrict permissions under %s", prefix, extra={"status": r.returncode})
                report.failed.append("share/zsh permissions")
        elif not ctx.dry_run:
            logger.error("brew --prefix returned nothing; zsh completion permissions left as-is")
            report.failed.append("share/zsh permissions")

        touch_marker(s.homebrew_marker_file, dry_run=ctx.dry_run)
        return report
