from __future__ import annotations


class ProvisionError(RuntimeError):
    """Fatal provisioning failure; the run stops with a non-zero status."""


class ConfigError(ProvisionError):
    pass


class ConfigMissing(ConfigError):
    pass


class ConfigMalformed(ConfigError):
    pass


class RuntimeBootstrapFailed(ProvisionError):
    pass


class RepositoryCloneFailed(ProvisionError):
    pass


class ShellNotFound(ProvisionError):
    pass


class MetadataUnavailable(ProvisionError):
    pass


class AssetDownloadFailed(ProvisionError):
    pass


class PayloadMissing(ProvisionError):
    pass
