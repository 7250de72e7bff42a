"""Install pipeline orchestration."""

from flowspace_installer.pipeline.executor import InstallPipeline

__all__ = ["InstallPipeline"]
