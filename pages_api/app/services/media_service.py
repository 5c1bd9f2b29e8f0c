"""
Cloudinary client used by the image proxy endpoints.

The client wraps a ``requests.Session`` and exposes the three
operations the admin UI needs: list uploaded images, delete one, and
rename one.  Listing goes through the Admin API with basic auth;
destroy and rename are Upload API calls and are signed with the API
secret as Cloudinary requires.

Errors from Cloudinary (network failures, non-2xx responses) are
raised as :class:`UpstreamError` with a generic message; the upstream
explanation is kept in ``detail`` for the logs only.
"""

from __future__ import annotations

import hashlib
import logging
import time
from typing import Any, Dict, Optional

import requests

from ..core.config import Settings
from ..core.errors import UpstreamError

logger = logging.getLogger(__name__)

# Parameters Cloudinary leaves out of the signature.
UNSIGNED_PARAMS = {"file", "api_key", "resource_type", "cloud_name", "signature"}


def sign_params(params: Dict[str, Any], api_secret: str) -> str:
    """Compute a Cloudinary request signature.

    Parameters are sorted by name, serialised as ``name=value`` pairs
    joined with ``&``, the API secret is appended and the result is
    hashed with SHA-1.  Empty values are skipped.
    """
    parts = []
    for key in sorted(params):
        value = params[key]
        if key in UNSIGNED_PARAMS or value is None or value == "":
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        parts.append(f"{key}={value}")
    to_sign = "&".join(parts) + api_secret
    return hashlib.sha1(to_sign.encode("utf-8")).hexdigest()


class MediaClient:
    """Thin client for the Cloudinary image API.

    Parameters
    ----------
    settings : Settings
        Supplies the cloud name, credentials, base URL and timeout.
    session : Optional[requests.Session]
        HTTP session to use; a new one is created when omitted.
    """

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None) -> None:
        self.cloud_name = settings.cloudinary_cloud_name
        self.api_key = settings.cloudinary_api_key
        self.api_secret = settings.cloudinary_api_secret
        self.base_url = settings.cloudinary_base_url.rstrip("/")
        self.timeout = settings.upstream_timeout
        self.session = session or requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def close(self) -> None:
        self.session.close()

    def _require_config(self) -> None:
        if not self.configured:
            raise UpstreamError(
                "Server configuration error",
                detail="Cloudinary configuration missing",
                status_code=500,
            )

    def _signed(self, params: Dict[str, Any]) -> Dict[str, Any]:
        params = dict(params, timestamp=int(time.time()))
        signature = sign_params(params, self.api_secret)
        form = {k: ("true" if v else "false") if isinstance(v, bool) else v for k, v in params.items()}
        form.update(signature=signature, api_key=self.api_key)
        return form

    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        self._require_config()
        url = f"{self.base_url}/{self.cloud_name}/{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            logger.error("Cloudinary %s %s failed: %s", method, path, exc)
            raise UpstreamError("Media service unavailable", detail=str(exc)) from exc
        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not response.ok:
            error = payload.get("error") if isinstance(payload, dict) else None
            detail = error.get("message") if isinstance(error, dict) else response.text
            logger.error("Cloudinary %s %s returned %s: %s", method, path, response.status_code, detail)
            raise UpstreamError("Media service request failed", detail=detail)
        return payload

    def list_images(self, limit: int = 10, next_cursor: Optional[str] = None) -> Dict[str, Any]:
        """Return one page of uploaded images.

        The result holds ``images`` (Cloudinary resource objects),
        ``next_cursor`` and ``has_more``.
        """
        params: Dict[str, Any] = {"max_results": limit, "type": "upload"}
        if next_cursor:
            params["next_cursor"] = next_cursor
        payload = self._request(
            "GET",
            "resources/image",
            params=params,
            auth=(self.api_key, self.api_secret),
        )
        cursor = payload.get("next_cursor")
        return {
            "images": payload.get("resources") or [],
            "next_cursor": cursor,
            "has_more": bool(cursor),
        }

    def delete_image(self, public_id: str) -> Dict[str, Any]:
        """Destroy an image; raises ``UpstreamError`` (400) if Cloudinary does not confirm."""
        payload = self._request("POST", "image/destroy", data=self._signed({"public_id": public_id}))
        if payload.get("result") != "ok":
            logger.warning("Cloudinary refused to delete %s: %s", public_id, payload.get("result"))
            raise UpstreamError(
                "Failed to delete image",
                detail=f"destroy result: {payload.get('result')}",
                status_code=400,
            )
        logger.info("Deleted image %s", public_id)
        return payload

    def rename_image(self, public_id: str, new_public_id: str, overwrite: bool = False) -> Dict[str, Any]:
        """Rename an image and return the updated resource."""
        params = {
            "from_public_id": public_id,
            "to_public_id": new_public_id,
            "overwrite": overwrite,
        }
        payload = self._request("POST", "image/rename", data=self._signed(params))
        logger.info("Renamed image %s to %s", public_id, new_public_id)
        return payload
