"""
Normalization of raw App Services user records.
"""

from typing import Any, Dict, Iterable, List, Optional

STATUS_ACTIVE = 'active'
STATUS_PENDING = 'pending'


def _pending_email(record: Dict[str, Any]) -> Optional[str]:
    login_ids = record.get('login_ids') or []
    if not login_ids:
        return None
    return login_ids[0].get('id')


def normalize_user(record: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'id': record.get('_id'),
        'email': (record.get('data') or {}).get('email'),
        'createdAt': record.get('creation_date'),
        'status': STATUS_ACTIVE,
    }


def normalize_pending_user(record: Dict[str, Any], created_at: int) -> Dict[str, Any]:
    """Pending users have no creation date, so the caller supplies one."""
    return {
        'id': record.get('_id'),
        'email': _pending_email(record),
        'createdAt': created_at,
        'status': STATUS_PENDING,
    }


def normalize_users(records: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [normalize_user(record) for record in records]


def normalize_pending_users(records: Iterable[Dict[str, Any]], created_at: int) -> List[Dict[str, Any]]:
    return [normalize_pending_user(record, created_at) for record in records]
