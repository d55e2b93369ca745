"""Code-hosting platform gateway."""

from .gateway import GitHubPlatformGateway, PlatformGateway

__all__ = ["GitHubPlatformGateway", "PlatformGateway"]
