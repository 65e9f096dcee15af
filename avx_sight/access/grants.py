"""Persistent storage for folder access grants."""

import json
import os
import secrets
import stat
import sys
import threading
from datetime import datetime
from pathlib import Path

from avx_sight.exceptions import GrantStoreError
from avx_sight.models import Grant

GRANTS_FILE_VERSION = 1


def normalize_path(path: Path | str) -> str:
    """Absolute, user-expanded, normalized form of a folder path."""
    return os.path.normpath(os.path.abspath(os.path.expanduser(str(path))))


class GrantStore:
    """Stores access grants as a JSON file, one grant per root folder.

    Grants are loaded when the store is created and revalidated on every
    lookup:

    1. If the folder is no longer a readable directory the grant is invalid
       and is removed.
    2. If the folder's device/inode no longer match the stored values the
       grant is stale and is refreshed in place. A stale grant that cannot
       be re-saved is removed.

    All mutations are serialised with a lock so that a store can be shared
    between concurrent scans.
    """

    def __init__(self, grants_path: Path):
        """Initialize the store and load any persisted grants.

        Args:
            grants_path: JSON file holding the grants. Parent directories are
                         created on first write.
        """
        self.grants_path = Path(grants_path).expanduser()
        self._lock = threading.Lock()
        self._grants: dict[str, Grant] = {}
        self.load()

    def load(self) -> None:
        """(Re)load grants from disk, replacing the in-memory set.

        A missing file means no grants. A corrupted file is ignored with a
        warning and treated as empty.
        """
        with self._lock:
            self._grants = {}
            if not self.grants_path.exists():
                return

            try:
                with open(self.grants_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                grants = [Grant.from_dict(entry) for entry in data["grants"]]
            except (json.JSONDecodeError, KeyError, TypeError, ValueError, OSError) as e:
                print(
                    f"Warning: Ignoring unreadable grants file {self.grants_path}: {e}",
                    file=sys.stderr,
                )
                return

            self._grants = {grant.path: grant for grant in grants}

    def get(self, path: Path | str) -> Grant | None:
        """Return a valid grant for a folder, revalidating it first.

        Args:
            path: Folder to look up

        Returns:
            The (possibly refreshed) Grant, or None if there is no usable grant
        """
        key = normalize_path(path)

        with self._lock:
            grant = self._grants.get(key)
            if grant is None:
                return None

            identity = _folder_identity(key)
            if identity is None:
                # Folder vanished or is no longer readable
                del self._grants[key]
                self._save_quietly()
                return None

            if identity != (grant.device, grant.inode):
                refreshed = Grant(
                    path=grant.path,
                    token=grant.token,
                    device=identity[0],
                    inode=identity[1],
                    created_at=grant.created_at,
                    refreshed_at=datetime.now(),
                )
                self._grants[key] = refreshed
                try:
                    self._save()
                except GrantStoreError as e:
                    print(f"Warning: Could not refresh stale grant for {key}: {e}", file=sys.stderr)
                    del self._grants[key]
                    self._save_quietly()
                    return None
                return refreshed

            return grant

    def put(self, path: Path | str) -> Grant:
        """Create and persist a grant for a folder.

        Args:
            path: Folder the user granted access to

        Returns:
            The newly stored Grant

        Raises:
            GrantStoreError: If the folder cannot be inspected or the store
                             cannot be written
        """
        key = normalize_path(path)
        identity = _folder_identity(key)
        if identity is None:
            raise GrantStoreError(f"Cannot grant access to {key}: not a readable directory")

        grant = Grant(
            path=key,
            token=secrets.token_hex(16),
            device=identity[0],
            inode=identity[1],
        )

        with self._lock:
            previous = self._grants.get(key)
            self._grants[key] = grant
            try:
                self._save()
            except GrantStoreError:
                # Keep the in-memory view consistent with what is on disk
                if previous is None:
                    del self._grants[key]
                else:
                    self._grants[key] = previous
                raise

        return grant

    def remove(self, path: Path | str) -> bool:
        """Revoke the grant for a folder.

        Returns:
            True if a grant existed and was removed

        Raises:
            GrantStoreError: If the store cannot be written
        """
        key = normalize_path(path)
        with self._lock:
            if key not in self._grants:
                return False
            del self._grants[key]
            self._save()
            return True

    def clear(self) -> None:
        """Revoke every grant."""
        with self._lock:
            self._grants = {}
            self._save()

    def all(self) -> list[Grant]:
        """Snapshot of stored grants (not revalidated), ordered by path."""
        with self._lock:
            return [self._grants[key] for key in sorted(self._grants)]

    def _save(self) -> None:
        """Write grants atomically. Caller must hold the lock."""
        payload = {
            "version": GRANTS_FILE_VERSION,
            "grants": [grant.to_dict() for grant in self._grants.values()],
        }
        tmp_path = self.grants_path.with_name(self.grants_path.name + ".tmp")
        try:
            self.grants_path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(payload, f, indent=2)
            os.replace(tmp_path, self.grants_path)
        except OSError as e:
            raise GrantStoreError(f"Cannot write grants file {self.grants_path}: {e}")

    def _save_quietly(self) -> None:
        try:
            self._save()
        except GrantStoreError as e:
            print(f"Warning: {e}", file=sys.stderr)


def _folder_identity(path: str) -> tuple[int, int] | None:
    """(device, inode) of a readable directory, or None."""
    try:
        st = os.stat(path)
    except OSError:
        return None
    if not stat.S_ISDIR(st.st_mode) or not os.access(path, os.R_OK | os.X_OK):
        return None
    return st.st_dev, st.st_ino
