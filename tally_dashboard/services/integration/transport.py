"""
Tally HTTP Transport
====================

POST envelope XML ke Tally listener dan map kegagalan `requests` menjadi
exception TallyIntegrationError. Tidak ada retry di layer ini.
"""

import errno
import logging
from typing import Optional

import requests

from ..exceptions import (
    TallyConnectionRefusedError, TallyHTTPError, TallyNoResponseError,
    TallyTransportError, TallyIntegrationError
)
from .xml_builder import TallyXMLBuilder

logger = logging.getLogger(__name__)

XML_HEADERS = {
    'Content-Type': 'application/xml',
    'Accept': 'application/xml',
    'User-Agent': 'TallyDashboard-Integration/1.0',
}


def _is_connection_refused(exc: Exception) -> bool:
    current = exc
    for _ in range(8):
        if current is None:
            return False
        if isinstance(current, ConnectionRefusedError):
            return True
        if getattr(current, 'errno', None) == errno.ECONNREFUSED:
            return True
        if 'refused' in str(current).lower():
            return True
        current = current.__cause__ or current.__context__ or (
            current.args[0] if current.args and isinstance(current.args[0], Exception) else None
        )
    return False


class TallyTransport:
    """
    Synchronous HTTP client untuk Tally.

    NOTE: memakai `requests` (blocking). Service async memanggilnya lewat
    asyncio.to_thread.
    """

    def __init__(self, base_url: str, timeout: int = 30, probe_timeout: int = 5,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.probe_timeout = probe_timeout
        self.session = session or requests.Session()

    def send(self, xml: str, timeout: Optional[int] = None) -> str:
        """POST xml ke Tally, return body response sebagai text"""
        try:
            response = self.session.post(
                self.base_url,
                data=xml.encode('utf-8'),
                headers=XML_HEADERS,
                timeout=timeout or self.timeout
            )
        except requests.exceptions.Timeout:
            raise TallyNoResponseError(
                f"No response received from Tally at {self.base_url} "
                f"within {timeout or self.timeout}s"
            )
        except requests.exceptions.ConnectionError as e:
            if _is_connection_refused(e):
                raise TallyConnectionRefusedError(self.base_url)
            raise TallyNoResponseError(f"No response received from Tally: {str(e)}")
        except requests.exceptions.RequestException as e:
            raise TallyTransportError(f"Tally request failed: {str(e)}")

        if response.status_code >= 400:
            raise TallyHTTPError(response.status_code, response.text)

        logger.debug(f"Tally response ({response.status_code}): {response.text[:1000]}")
        return response.text

    def probe(self, xml: Optional[str] = None) -> bool:
        """
        Cek listener Tally dengan probe timeout yang pendek.

        Kegagalan di-raise apa adanya (refused, no response, HTTP error)
        supaya caller bisa membedakan penyebabnya.
        """
        if xml is None:
            xml = TallyXMLBuilder(company_name='').build_connection_probe()
        try:
            self.send(xml, timeout=self.probe_timeout)
        except TallyIntegrationError as e:
            logger.warning(f"Tally connection probe failed: {e.message}")
            raise
        return True

    def close(self):
        self.session.close()
