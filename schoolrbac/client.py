"""HTTP client for the permission endpoints.

Used by the override editing workflow; every response is parsed with the
pydantic schemas so callers only ever see validated data.
"""
from typing import Any, Dict, Iterable, List, Optional
import logging

import httpx
from pydantic import ValidationError

from .core.catalog import Catalog
from .core.permissions import MergedPermission
from .schemas import LoginOut, MergedPermissionOut, ModuleOut, StaffOut, catalog_from_modules

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Non-2xx response, transport failure or malformed payload."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


def _error_message(body: Any) -> Optional[str]:
    """Reason from an error body: {'error': {'detail': ...}}, {'error': '...'} or {'msg': '...'}."""
    if not isinstance(body, dict):
        return None
    err = body.get('error')
    if isinstance(err, dict):
        detail = err.get('detail') or err.get('title')
        return str(detail) if detail else None
    if isinstance(err, str) and err:
        return err
    msg = body.get('msg') or body.get('message')
    return str(msg) if msg else None


class PermissionsApiClient:
    def __init__(self, base_url: str, token: Optional[str] = None, transport: Optional[httpx.BaseTransport] = None, timeout: float = 10.0):
        self.base_url = base_url.rstrip('/')
        self.token = token
        self._http = httpx.Client(base_url=self.base_url, transport=transport, timeout=timeout)

    def close(self) -> None:
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _headers(self) -> Dict[str, str]:
        return {'Authorization': f'Bearer {self.token}'} if self.token else {}

    def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            resp = self._http.request(method, path, headers=self._headers(), **kwargs)
        except httpx.HTTPError as e:
            logger.warning('%s %s failed: %s', method, path, e)
            raise ApiError(f'request failed: {e}') from e
        try:
            body = resp.json()
        except ValueError:
            body = None
        if resp.is_error:
            message = _error_message(body) or f'{method} {path} returned {resp.status_code}'
            logger.info('%s %s -> %s %s', method, path, resp.status_code, message)
            raise ApiError(message, resp.status_code)
        if body is None:
            raise ApiError(f'{method} {path} returned a non-JSON body', resp.status_code)
        return body

    @staticmethod
    def _data(body: Any) -> list:
        data = body.get('data') if isinstance(body, dict) else None
        if not isinstance(data, list):
            raise ApiError('response is missing a data list')
        return data

    def login(self, email: str, password: str, school_code: str) -> LoginOut:
        body = self._request('POST', '/auth/login', json={'email': email, 'password': password, 'school_code': school_code})
        try:
            out = LoginOut.model_validate(body)
        except ValidationError as e:
            raise ApiError(f'malformed login response: {e}') from e
        self.token = out.access_token
        return out

    def fetch_catalog(self) -> Catalog:
        body = self._request('GET', '/catalog/modules')
        try:
            modules = [ModuleOut.model_validate(m) for m in self._data(body)]
        except ValidationError as e:
            raise ApiError(f'malformed catalog: {e}') from e
        return catalog_from_modules(modules)

    def fetch_staff(self, q: Optional[str] = None, limit: Optional[int] = None, offset: Optional[int] = None) -> List[StaffOut]:
        params = {k: v for k, v in (('q', q), ('limit', limit), ('offset', offset)) if v is not None}
        body = self._request('GET', '/staff', params=params)
        try:
            return [StaffOut.model_validate(s) for s in self._data(body)]
        except ValidationError as e:
            raise ApiError(f'malformed staff list: {e}') from e

    def fetch_merged_permissions(self, staff_id: str) -> List[MergedPermission]:
        body = self._request('GET', f'/staff/{staff_id}/permissions')
        try:
            return [MergedPermissionOut.model_validate(p).to_core() for p in self._data(body)]
        except ValidationError as e:
            raise ApiError(f'malformed permissions: {e}') from e

    def save_overrides(self, staff_id: str, rows: Iterable[Dict[str, Any]], assigned_by: Optional[str] = None) -> Dict[str, Any]:
        payload = {'permissions': list(rows), 'assigned_by': assigned_by}
        return self._request('POST', f'/staff/{staff_id}/permissions', json=payload)


__all__ = ['ApiError', 'PermissionsApiClient']
