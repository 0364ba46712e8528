# FlexiSync Salesforce Connection
# httpx-based implementation of the remote Connection against the REST API

import json
from collections.abc import Iterator
from typing import Any, Optional

import httpx

from flexisync.errors import RemoteError
from flexisync.utils.records import Record

DEFAULT_API_VERSION = "v58.0"
DEFAULT_TIMEOUT = 60.0

# sObject Collections accept at most 200 records per call
COLLECTION_BATCH_SIZE = 200


class SalesforceConnection:
    """
    Synchronous client for the Salesforce REST API.

    Handles request authentication, paging and error translation. All
    transport and HTTP status errors surface as RemoteError.
    """

    def __init__(
        self,
        instance_url: str,
        access_token: str,
        *,
        api_version: str = DEFAULT_API_VERSION,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.Client] = None,
    ):
        """
        Initialize connection.

        Args:
            instance_url: Org instance URL, e.g. https://example.my.salesforce.com
            access_token: OAuth access token.
            api_version: REST API version.
            timeout: Request timeout in seconds.
            client: Optional preconfigured httpx client (used by tests).
        """
        self.instance_url = instance_url.rstrip("/")
        self.api_version = api_version
        self._client = client or httpx.Client(timeout=timeout)
        self._headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    @property
    def data_url(self) -> str:
        return f"{self.instance_url}/services/data/{self.api_version}"

    @property
    def apex_url(self) -> str:
        return f"{self.instance_url}/services/apexrest"

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def __enter__(self) -> "SalesforceConnection":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json_data: Optional[Any] = None,
    ) -> httpx.Response:
        """
        Make an HTTP request and translate failures.

        Raises:
            RemoteError: On HTTP status or network errors.
        """
        try:
            response = self._client.request(method, url, headers=self._headers, params=params, json=json_data)
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            detail = e.response.text
            try:
                detail = json.dumps(e.response.json())
            except ValueError:
                pass
            raise RemoteError(
                f"Salesforce API error {e.response.status_code} on {method} {url}",
                status_code=e.response.status_code,
                detail=detail,
            ) from e
        except httpx.RequestError as e:
            raise RemoteError(f"Salesforce API communication error: {e.__class__.__name__} on {method} {url}") from e

    def query(self, query: str) -> Iterator[Record]:
        """Run a SOQL query, following nextRecordsUrl until all records are fetched."""
        response = self._request("GET", f"{self.data_url}/query", params={"q": query}).json()
        while True:
            yield from response.get("records", [])
            next_url = response.get("nextRecordsUrl")
            if response.get("done", True) or not next_url:
                break
            response = self._request("GET", f"{self.instance_url}{next_url}").json()

    def find(self, object_type: str, predicate: str) -> list[Record]:
        """Find record ids of an object type matching a WHERE predicate."""
        return list(self.query(f"SELECT Id FROM {object_type} WHERE {predicate}"))

    def upsert(
        self,
        object_type: str,
        records: list[Record],
        external_id_field: str,
        *,
        all_or_none: bool = False,
    ) -> list[dict[str, Any]]:
        """Upsert records through the sObject Collections API."""
        results: list[dict[str, Any]] = []
        url = f"{self.data_url}/composite/sobjects/{object_type}/{external_id_field}"
        for start in range(0, len(records), COLLECTION_BATCH_SIZE):
            batch = [
                {"attributes": {"type": object_type}, **record}
                for record in records[start : start + COLLECTION_BATCH_SIZE]
            ]
            response = self._request("PATCH", url, json_data={"allOrNone": all_or_none, "records": batch})
            results.extend(response.json())
        return results

    def delete(self, object_type: str, ids: list[str]) -> list[dict[str, Any]]:
        """Delete records by id through the sObject Collections API."""
        results: list[dict[str, Any]] = []
        for start in range(0, len(ids), COLLECTION_BATCH_SIZE):
            batch = ids[start : start + COLLECTION_BATCH_SIZE]
            response = self._request(
                "DELETE",
                f"{self.data_url}/composite/sobjects",
                params={"ids": ",".join(batch), "allOrNone": "false"},
            )
            results.extend(response.json())
        return results

    def post(self, path: str, body: Any) -> Any:
        """Post a JSON body to an Apex REST path."""
        response = self._request("POST", f"{self.apex_url}/{path.lstrip('/')}", json_data=body)
        if not response.content:
            return None
        return response.json()
