from __future__ import annotations

import logging
from typing import List, Sequence

from ..config import PackageKind, PackageSpec
from ..lib.brew import brew_install, cask_env, classify_package
from ..pipeline import RunContext, StepReport

logger = logging.getLogger(__name__)


def select_packages(packages: Sequence[PackageSpec]) -> List[PackageSpec]:
    """Brew-managed packages, each name once, in declared order."""

    selected: List[PackageSpec] = []
    seen: set[str] = set()
    for pkg in packages:
        if pkg.name in seen:
            logger.warning("Package %s is declared more than once; using the first entry", pkg.name)
            continue
        seen.add(pkg.name)
        if pkg.kind is PackageKind.NATIVE:
            logger.info("%s is a native package; not installed via Homebrew", pkg.name)
            continue
        selected.append(pkg)
    return selected


class InstallPackagesStep:
    step_id = "40_install_packages"

    def run(self, ctx: RunContext) -> StepReport:
        s = ctx.settings
        brew = s.brew_cmd
        env = cask_env(s.applications_dir)
        report = StepReport(step_id=self.step_id)

        selected = select_packages(ctx.desired.packages)
        selected_names = {p.name for p in selected}
        report.skipped.extend(dict.fromkeys(p.name for p in ctx.desired.packages if p.name not in selected_names))

        logger.info("Installing software using Homebrew...")
        for pkg in selected:
            logger.info("Installing %s...", pkg.name)
            record = classify_package(brew, pkg.name, env=env, dry_run=ctx.dry_run)
            if record is None:
                logger.error("%s is not available as a formula or cask.", pkg.name, extra={"status": 1})
                report.failed.append(pkg.name)
                continue

            logger.info("%s is a %s. Installing...", pkg.name, record)
            r = brew_install(brew, pkg.name, cask=(record == "cask"), env=env, dry_run=ctx.dry_run)
            if r.ok:
                logger.info("%s installed successfully.", pkg.name)
                report.ok.append(pkg.name)
            else:
                logger.error("Failed to install %s.", pkg.name, extra={"status": r.returncode})
                report.failed.append(pkg.name)

        logger.info("Software packages installed...")
        return report
