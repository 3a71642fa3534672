from __future__ import annotations
"""Editing session for one staff member's overrides.

Holds what an operator's screen holds: the catalog, the selected staff
member's merged permissions, the working override map and the status
banners. All I/O goes through PermissionsApiClient.
"""
from typing import List, Optional, Tuple
import logging
import threading

from .client import ApiError, PermissionsApiClient
from .core.catalog import Catalog
from .core.context import ActorContext
from .core.editor import OverrideEditor, OverrideEntry
from .core.permissions import MergedPermission

logger = logging.getLogger(__name__)

SAVE_SUCCESS_MESSAGE = 'Permissions updated successfully'


class SessionStateError(RuntimeError):
    pass


class SaveInProgressError(SessionStateError):
    pass


class OverridesSession:
    def __init__(self, client: PermissionsApiClient, actor: ActorContext):
        self.client = client
        self.actor = actor
        self.catalog: Optional[Catalog] = None
        self.staff_id: Optional[str] = None
        self.merged: List[MergedPermission] = []
        self.editor: Optional[OverrideEditor] = None
        self.error: Optional[str] = None
        self.success: Optional[str] = None
        self._save_lock = threading.Lock()

    @property
    def saving(self) -> bool:
        return self._save_lock.locked()

    def load_catalog(self) -> bool:
        """Fetch the module tree; on failure the previous catalog is kept as is."""
        try:
            catalog = self.client.fetch_catalog()
        except ApiError as e:
            self.error = f'Failed to load modules: {e.message}'
            return False
        self.catalog = catalog
        return True

    def select_staff(self, staff_id: str) -> bool:
        # the previous staff member's draft never carries over
        self._discard_staff()
        self.staff_id = staff_id
        self.success = None
        return self._load_staff()

    def _load_staff(self) -> bool:
        try:
            merged = self.client.fetch_merged_permissions(self.staff_id)
        except ApiError as e:
            self.error = f'Failed to load permissions: {e.message}'
            return False
        self.merged = merged
        self.editor = OverrideEditor.from_merged(merged, self.staff_id)
        return True

    def _discard_staff(self) -> None:
        self.editor = None
        self.merged = []

    def _require_editor(self) -> OverrideEditor:
        if self.editor is None:
            raise SessionStateError('no staff member loaded')
        return self.editor

    def toggle(self, sub_module_id: str, category_id: str, kind: str) -> OverrideEntry:
        return self._require_editor().toggle(sub_module_id, category_id, kind, self.merged)

    def remove_override(self, sub_module_id: str, category_id: str) -> None:
        self._require_editor().remove_override(sub_module_id, category_id)

    def effective(self, sub_module_id: str, category_id: str) -> Tuple[bool, bool]:
        return self._require_editor().effective(sub_module_id, category_id, self.merged)

    def save(self) -> bool:
        """Persist the working map as the staff member's complete override set.

        On failure the working map is left exactly as it was. On success it is
        rebuilt from a fresh load; if that load fails the editor is dropped
        until select_staff() succeeds, and only the load error is shown.
        """
        editor = self._require_editor()
        if not self._save_lock.acquire(blocking=False):
            raise SaveInProgressError('a save is already in progress')
        try:
            self.success = None
            try:
                self.client.save_overrides(self.staff_id, editor.to_save_list(), assigned_by=self.actor.staff_id)
            except ApiError as e:
                self.error = f'Failed to save permissions: {e.message}'
                logger.info('Save for staff %s failed: %s', self.staff_id, e.message)
                return False
            self.error = None
            # old snapshot no longer matches the server
            self._discard_staff()
            if self._load_staff():
                self.success = SAVE_SUCCESS_MESSAGE
            else:
                logger.info('Reload after save for staff %s failed', self.staff_id)
            return True
        finally:
            self._save_lock.release()

    def dismiss_error(self) -> None:
        self.error = None


__all__ = ['OverridesSession', 'SaveInProgressError', 'SessionStateError']
