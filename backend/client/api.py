import logging
import requests

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = 'http://localhost:3000/api'
DEFAULT_TIMEOUT = 10


class ApiError(Exception):
    """Failed API call; message is the server's `error` text when there is one"""

    def __init__(self, message, status=None):
        super().__init__(message)
        self.message = message
        self.status = status


class ApiClient:
    """
    Thin JSON transport for the /api endpoints.

    Every call returns the decoded body of a successful response and
    raises ApiError otherwise, so callers never inspect `success`.
    """

    def __init__(self, base_url=DEFAULT_BASE_URL, session=None, timeout=DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout

    def url(self, path):
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(self, method, path, payload=None):
        url = self.url(path)
        logger.debug("%s %s", method, url)

        try:
            response = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise ApiError(f'Network error: {e}') from e

        try:
            body = response.json()
        except ValueError:
            raise ApiError(f'HTTP error! status: {response.status_code}', response.status_code)

        if not isinstance(body, dict):
            raise ApiError('Unexpected response from server', response.status_code)

        if response.status_code >= 400 or not body.get('success'):
            message = body.get('error') or f'HTTP error! status: {response.status_code}'
            raise ApiError(message, response.status_code)

        return body

    def get(self, path):
        return self.request('GET', path)

    def post(self, path, payload):
        return self.request('POST', path, payload)

    def put(self, path, payload):
        return self.request('PUT', path, payload)

    def delete(self, path):
        return self.request('DELETE', path)
