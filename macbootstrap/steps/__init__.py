from .step_10_bootstrap_homebrew import BootstrapHomebrewStep
from .step_20_clone_init_repo import CloneInitRepoStep
from .step_30_provision_files import ProvisionFilesStep
from .step_40_install_packages import InstallPackagesStep
from .step_50_configure_shell import ConfigureShellStep
from .step_60_install_nextcloud import InstallNextcloudStep
from .step_70_configure_desktop import ConfigureDesktopStep
from .step_80_install_extensions import InstallExtensionsStep
from .step_90_download_files import DownloadFilesStep
from .step_95_finalize import FinalizeStep

__all__ = [
    "BootstrapHomebrewStep",
    "CloneInitRepoStep",
    "ProvisionFilesStep",
    "InstallPackagesStep",
    "ConfigureShellStep",
    "InstallNextcloudStep",
    "ConfigureDesktopStep",
    "InstallExtensionsStep",
    "DownloadFilesStep",
    "FinalizeStep",
]
