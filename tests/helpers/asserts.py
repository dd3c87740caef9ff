from typing import Optional, Dict, Any
from fastapi.testclient import TestClient

def api_call(client: TestClient, method: str, path: str, headers: Optional[Dict[str, str]] = None, json: Optional[Any] = None, expected_min: int = 200, expected_max: int = 300, **kwargs):
    response = client.request(method, path, headers=headers, json=json, **kwargs)
    ok = expected_min <= response.status_code < expected_max
    try:
        body = response.json()
    except Exception:
        body = response.text
    assert ok, f"{method} {path} => {response.status_code}, body={body}, json={json}"
    return response

def data_of(response) -> Any:
    return response.json().get("data")

def assert_error(response, status_code: int, code: str):
    assert response.status_code == status_code, f"expected {status_code}, got {response.status_code}: {response.text}"
    body = response.json()
    assert body["error"]["code"] == code, body
    assert body["request_id"]
