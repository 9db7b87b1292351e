"""HTTP client for the assistant endpoint, using only stdlib (urllib, json, ssl).

Sends an OpenAI-style chat-completions request to the configured
endpoint URL and returns the decoded JSON body. Interpreting the body
(picking the first choice) is left to the session.
"""

import http.client
import json
import logging
import ssl
import urllib.error
import urllib.request

logger = logging.getLogger(__name__)


class TransportError(Exception):
    """The request to the assistant endpoint failed."""
    pass


class EndpointClient:
    """Posts single-turn chat requests to one endpoint."""

    def __init__(self, endpoint: str, model: str = "", api_key: str = "",
                 timeout: float = 60.0):
        self.endpoint = endpoint.strip()
        self.model = model
        self.api_key = api_key
        self.timeout = timeout
        self._ssl_ctx = ssl.create_default_context()

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _body(self, text: str) -> dict:
        body = {"messages": [{"role": "user", "content": text}]}
        if self.model:
            body["model"] = self.model
        return body

    def complete(self, text: str) -> dict:
        """Send one user message. Returns the parsed JSON response body."""
        if not self.endpoint:
            raise TransportError("No API endpoint configured")
        logger.debug("POST %s (%d chars)", self.endpoint, len(text))
        return self._http_post(self.endpoint, self._headers(), self._body(text))

    def _http_post(self, url: str, headers: dict, body: dict) -> dict:
        payload = json.dumps(body).encode("utf-8")
        req = urllib.request.Request(url, data=payload, headers=headers, method="POST")

        try:
            ctx = self._ssl_ctx if url.startswith("https") else None
            with urllib.request.urlopen(req, context=ctx, timeout=self.timeout) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as e:
            raise TransportError(f"HTTP {e.code}: {e.reason}")
        except urllib.error.URLError as e:
            raise TransportError(f"Connection error: {e.reason}")
        except (OSError, ValueError, http.client.HTTPException) as e:
            raise TransportError(f"Request failed: {e}")

        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise TransportError(f"Invalid JSON response: {e}")
        if not isinstance(data, dict):
            raise TransportError("Response body is not a JSON object")
        return data
