"""Capability interfaces.

The importer depends only on these protocols, never on a concrete vault.
Any file-tree-like backend (local directory, in-memory tree, an editor's
vault adapter) can be substituted.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class IStorage(Protocol):
    """Vault storage backend.

    Paths are backend-relative, '/'-separated, without a leading separator.
    The empty string denotes the vault root.

    Every failure is raised as a StorageError subclass:
    - AlreadyExistsError when a create targets an existing path
    - NotFoundError when a file or its parent folder is missing
    """

    @property
    def config_dir(self) -> str:
        """Backend-relative path of the vault configuration directory."""
        ...

    async def create_folder(self, path: str) -> None:
        """Create a folder and any missing ancestors.

        Raises:
            AlreadyExistsError: If the folder (or a file) already exists at path
        """
        ...

    async def create(self, path: str, text: str) -> None:
        """Create a new text file.

        Raises:
            AlreadyExistsError: If path already exists
            NotFoundError: If the parent folder is missing
        """
        ...

    async def create_binary(self, path: str, data: bytes) -> None:
        """Create a new binary file. Same failure modes as create()."""
        ...

    async def write(self, path: str, text: str) -> None:
        """Create or overwrite a text file in place."""
        ...

    async def write_binary(self, path: str, data: bytes) -> None:
        """Create or overwrite a binary file in place."""
        ...

    async def read(self, path: str) -> str: ...

    async def read_binary(self, path: str) -> bytes: ...

    async def exists(self, path: str) -> bool: ...


class INotifier(Protocol):
    """User-feedback channel (editor notices, console output, logs)."""

    def notify(self, message: str, *, level: str = "info") -> None:
        """Show one message.

        Args:
            message: Human readable text
            level: "info" | "warning" | "error"
        """
        ...
