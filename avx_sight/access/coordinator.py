"""Access coordination for library folders.

The AccessCoordinator turns a folder path into an AccessibleDirectory the
scanner can read, using a persisted grant when one is still valid and
prompting for a new one otherwise.
"""

from datetime import datetime
from pathlib import Path

from avx_sight.access.grants import GrantStore, normalize_path
from avx_sight.access.handle import AccessibleDirectory
from avx_sight.access.prompt import AccessPrompter
from avx_sight.exceptions import AccessDeniedError, GrantStoreError
from avx_sight.models import AuditEvent, Grant, PromptOutcome
from avx_sight.observability.audit import AuditSink


class AccessCoordinator:
    """Obtains and persists read grants for library folders.

    Grants live in a GrantStore that is loaded once and refreshed on demand.
    The user is only prompted when no valid grant exists for a folder, or the
    stored one has become invalid. The scanner never sees the prompt; it only
    receives a ready-to-read AccessibleDirectory or an AccessDeniedError.

    Example:
        >>> coordinator = AccessCoordinator(
        ...     grant_store=GrantStore(Path("~/.config/avx-sight/grants.json")),
        ...     prompter=ConsolePrompter(),
        ... )
        >>> directory = coordinator.ensure_accessible(Path("/Library"))
    """

    def __init__(
        self,
        grant_store: GrantStore,
        prompter: AccessPrompter,
        audit_sink: AuditSink | None = None,
    ):
        self.grant_store = grant_store
        self.prompter = prompter
        self._audit_sink = audit_sink

    def ensure_accessible(self, path: Path | str) -> AccessibleDirectory:
        """Return a readable handle for a folder, prompting if needed.

        Args:
            path: Library folder to access

        Returns:
            AccessibleDirectory backed by a valid grant

        Raises:
            AccessDeniedError: If the user denied or cancelled the request,
                               selected a different folder, or the grant
                               could not be persisted
        """
        if not str(path):
            raise AccessDeniedError("", "Zero-length folder path")

        target = Path(path).expanduser()

        grant = self.grant_store.get(target)
        if grant is not None:
            self._emit("access", target, {"granted": True, "prompted": False})
            return AccessibleDirectory(target, grant)

        response = self.prompter.request_access(target)

        if response.outcome is PromptOutcome.CANCELLED:
            self._emit("access", target, {"granted": False, "cancelled": True})
            raise AccessDeniedError(str(target), "Request cancelled", cancelled=True)

        if response.outcome is PromptOutcome.DENIED or response.selected_path is None:
            self._emit("access", target, {"granted": False, "cancelled": False})
            raise AccessDeniedError(
                str(target), "Some plugins may not be listed"
            )

        if normalize_path(response.selected_path) != normalize_path(target):
            desired = target.name or str(target)
            self._emit(
                "access",
                target,
                {"granted": False, "selected": str(response.selected_path)},
            )
            raise AccessDeniedError(
                str(target),
                f"Incorrect folder selected. Please select the '{desired}' "
                f"folder specifically to grant access",
            )

        grant = self._persist(target)
        self._emit("access", target, {"granted": True, "prompted": True})
        return AccessibleDirectory(target, grant)

    def revoke(self, path: Path | str) -> bool:
        """Forget the grant for a folder so the next scan prompts again."""
        removed = self.grant_store.remove(path)
        if removed:
            self._emit("grant", Path(path), {"operation": "revoke"})
        return removed

    def clear(self) -> int:
        """Forget every grant. Returns how many were removed."""
        grants = self.grant_store.all()
        self.grant_store.clear()
        for grant in grants:
            self._emit("grant", Path(grant.path), {"operation": "revoke"})
        return len(grants)

    def grants(self) -> list[Grant]:
        """Currently stored grants."""
        return self.grant_store.all()

    def _persist(self, target: Path) -> Grant:
        try:
            grant = self.grant_store.put(target)
        except GrantStoreError as e:
            self._emit("error", target, {"operation": "grant", "error": str(e)})
            raise AccessDeniedError(
                str(target), f"Could not save access permissions: {e}"
            )
        self._emit("grant", target, {"operation": "create"})
        return grant

    def _emit(self, kind: str, path: Path, detail: dict) -> None:
        if self._audit_sink:
            self._audit_sink.log(
                AuditEvent(ts=datetime.now(), kind=kind, path=str(path), detail=detail)
            )
