"""Access module for folder grants and scoped directory handles."""

from avx_sight.access.coordinator import AccessCoordinator
from avx_sight.access.grants import GrantStore
from avx_sight.access.handle import AccessibleDirectory
from avx_sight.access.prompt import AccessPrompter, ConsolePrompter, StaticPrompter

__all__ = [
    "AccessCoordinator",
    "AccessibleDirectory",
    "AccessPrompter",
    "ConsolePrompter",
    "GrantStore",
    "StaticPrompter",
]
