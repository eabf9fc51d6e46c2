from typing import Any, Dict, List, Optional

import requests

from smart_invite.core.logging import logger


class ApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ApiClient:
    """Thin wrapper over the JSON API, mirroring the browser fetch helper.

    ``session`` only needs a requests-style ``request(method, url, json=..., timeout=...)``.
    """

    def __init__(self, base_url: str = "http://localhost:8000", session=None, timeout: float = 20):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch_api(self, url: str, method: str = "GET", json: Any = None) -> Any:
        api_url = f"{self.base_url}/api/{url.lstrip('/')}"
        logger.debug("fetch_api %s %s", method, api_url)

        try:
            r = self.session.request(method, api_url, json=json, timeout=self.timeout)
        except requests.RequestException as ex:
            raise ApiError(str(ex)) from ex

        if r.status_code >= 400:
            try:
                data = r.json()
            except ValueError:
                data = {"detail": r.text or "Erro na requisição"}
            message = None
            if isinstance(data, dict):
                message = data.get("detail") or data.get("error")
            raise ApiError(str(message or f"Erro {r.status_code}"), r.status_code)

        if not r.text:
            return {}
        try:
            return r.json()
        except ValueError as ex:
            logger.error("invalid JSON from %s: %r", api_url, r.text[:200])
            raise ApiError("Resposta inválida do servidor", r.status_code) from ex

    # events

    def create_event(self, **fields) -> Dict[str, Any]:
        return self.fetch_api("events", "POST", fields)

    def list_events(self, with_stats: bool = False) -> List[Dict[str, Any]]:
        return self.fetch_api("events/with-stats" if with_stats else "events")

    def get_event_complete(self, event_id: int) -> Dict[str, Any]:
        return self.fetch_api(f"events/{event_id}/complete")

    # guests

    def create_guest(self, event_id: int, name: str) -> Dict[str, Any]:
        return self.fetch_api("guests", "POST", {"eventId": event_id, "name": name})

    def delete_guest(self, guest_id: int) -> Dict[str, Any]:
        return self.fetch_api(f"guests/{guest_id}", "DELETE")

    def get_invite(self, token: str) -> Dict[str, Any]:
        return self.fetch_api(f"invite/{token}")

    def update_guest(self, token: str, confirmed: bool, num_people: int) -> Dict[str, Any]:
        return self.fetch_api(
            "guests",
            "PUT",
            {"token": token, "confirmed": confirmed, "numPeople": num_people},
        )
