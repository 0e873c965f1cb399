"""
App Services admin API access.

``HttpClient`` is the only place that touches the network; everything above
it talks in terms of ``HttpResponse`` so tests can swap in a fake client.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional

import requests

from .errors import AuthenticationError, FetchError, TransportError
from .log import ExportLogger

BASE_URL = 'https://services.cloud.mongodb.com/api/admin/v3.0'
LOGIN_PATH = '/auth/providers/mongodb-cloud/login'


@dataclass(frozen=True)
class HttpResponse:
    status: int
    body: Any

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class HttpClient:
    """Thin wrapper around a requests session returning status and decoded body."""

    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session or requests.Session()

    def get(self, url: str, headers: Optional[Dict[str, str]] = None,
            params: Optional[Dict[str, Any]] = None) -> HttpResponse:
        return self._request('GET', url, headers=headers, params=params)

    def post(self, url: str, json_body: Any = None,
             headers: Optional[Dict[str, str]] = None) -> HttpResponse:
        return self._request('POST', url, headers=headers, json=json_body)

    def close(self) -> None:
        self.session.close()

    def _request(self, method: str, url: str, **kwargs) -> HttpResponse:
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = response.text
        return HttpResponse(status=response.status_code, body=body)


def paginate(
    fetch_page: Callable[[Optional[str]], List[Dict[str, Any]]],
    cursor_of: Callable[[Dict[str, Any]], str],
) -> Iterator[Dict[str, Any]]:
    """
    Yield records from a cursor-paginated endpoint in server order.

    ``fetch_page(None)`` requests the first page; every following call gets
    the cursor of the last record of the previous page. Iteration ends at the
    first empty page.
    """
    cursor = None
    while True:
        page = fetch_page(cursor)
        if not page:
            return
        for record in page:
            yield record
        cursor = cursor_of(page[-1])


def record_id(record: Dict[str, Any]) -> str:
    return record['_id']


class AppServicesClient:
    def __init__(self, http: HttpClient, log: ExportLogger, base_url: str = BASE_URL):
        self.http = http
        self.log = log
        self.base_url = base_url.rstrip('/')
        self.access_token: Optional[str] = None

    def _auth_headers(self) -> Dict[str, str]:
        if not self.access_token:
            raise AuthenticationError(None, 'Not logged in')
        return {
            'Authorization': f'Bearer {self.access_token}',
            'Accept': 'application/json',
        }

    def login(self, username: str, api_key: str) -> str:
        """Exchange a username/API key pair for a bearer token."""
        self.log.debug('Authenticating with MongoDB Atlas...')
        response = self.http.post(
            f'{self.base_url}{LOGIN_PATH}',
            json_body={'username': username, 'apiKey': api_key},
            headers={'Content-Type': 'application/json', 'Accept': 'application/json'},
        )

        if not response.ok:
            self.log.error('Authentication failed:', response.status)
            self.log.debug('Error details:', response.body)
            raise AuthenticationError(response.status, response.body)

        token = response.body.get('access_token') if isinstance(response.body, dict) else None
        if not token:
            self.log.debug('Error details:', response.body)
            raise AuthenticationError(response.status, response.body)

        self.access_token = token
        self.log.debug('Authentication successful')
        return token

    def _get_list(self, resource: str, path: str, after: Optional[str] = None) -> List[Dict[str, Any]]:
        url = f'{self.base_url}{path}'
        params = {'after': after} if after is not None else None
        self.log.debug(f'Fetching {resource} from: {url}' + (f'?after={after}' if after is not None else ''))

        response = self.http.get(url, headers=self._auth_headers(), params=params)
        if not response.ok:
            self.log.error(f'Error fetching {resource}:', response.status)
            self.log.debug('Error details:', response.body)
            raise FetchError(resource, response.status, response.body)
        if not isinstance(response.body, list):
            raise FetchError(resource, response.status, response.body,
                             reason='expected a JSON array in the response')

        self.log.debug(f'Retrieved {len(response.body)} {resource}')
        return response.body

    def _app_path(self, group_id: str, app_id: str) -> str:
        return f'/groups/{group_id}/apps/{app_id}'

    def get_users_page(self, group_id: str, app_id: str, after: Optional[str] = None) -> List[Dict[str, Any]]:
        return self._get_list('users', f'{self._app_path(group_id, app_id)}/users', after)

    def get_pending_users_page(self, group_id: str, app_id: str,
                               after: Optional[str] = None) -> List[Dict[str, Any]]:
        path = f'{self._app_path(group_id, app_id)}/user_registrations/pending_users'
        return self._get_list('pending users', path, after)

    def get_all_users(self, group_id: str, app_id: str) -> List[Dict[str, Any]]:
        self.log.debug('Getting all users...')
        users = list(paginate(lambda after: self.get_users_page(group_id, app_id, after), record_id))
        self.log.debug(f'Total users retrieved: {len(users)}')
        return users

    def get_all_pending_users(self, group_id: str, app_id: str) -> List[Dict[str, Any]]:
        self.log.debug('Getting all pending users...')
        pending_users = list(
            paginate(lambda after: self.get_pending_users_page(group_id, app_id, after), record_id)
        )
        self.log.debug(f'Total pending users retrieved: {len(pending_users)}')
        return pending_users

    def list_apps(self, group_id: str) -> List[Dict[str, Any]]:
        return self._get_list('apps', f'/groups/{group_id}/apps')
