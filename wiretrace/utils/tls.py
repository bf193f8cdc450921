"""TLS connection details of a response."""

from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog


logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class TLSInfo:
    """What the logger prints about a TLS connection."""

    version: str | None = None
    cipher: str | None = None
    alpn: str | None = None
    peer_cert: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_ssl_object(cls, ssl_object: Any) -> "TLSInfo":
        cipher = ssl_object.cipher()
        return cls(
            version=ssl_object.version(),
            cipher=cipher[0] if cipher else None,
            alpn=ssl_object.selected_alpn_protocol(),
            peer_cert=ssl_object.getpeercert() or {},
        )

    def lines(self) -> list[str]:
        """Info lines describing the connection."""
        lines = [f"TLS connection using {self.version or 'unknown'} / {self.cipher or 'unknown'}"]
        if self.alpn:
            lines.append(f"ALPN: {self.alpn} accepted")
        if self.peer_cert:
            lines.append("Server certificate:")
            subject = _format_name(self.peer_cert.get("subject", ()))
            if subject:
                lines.append(f" subject: {subject}")
            if "notBefore" in self.peer_cert:
                lines.append(f" start date: {self.peer_cert['notBefore']}")
            if "notAfter" in self.peer_cert:
                lines.append(f" expire date: {self.peer_cert['notAfter']}")
            issuer = _format_name(self.peer_cert.get("issuer", ()))
            if issuer:
                lines.append(f" issuer: {issuer}")
        return lines


_NAME_ABBREVIATIONS = {
    "commonName": "CN",
    "organizationName": "O",
    "organizationalUnitName": "OU",
    "countryName": "C",
    "stateOrProvinceName": "ST",
    "localityName": "L",
}


def _format_name(name: Any) -> str:
    """Render a certificate name as returned by ``SSLSocket.getpeercert()``."""
    parts = []
    for rdn in name:
        for key, value in rdn:
            parts.append(f"{_NAME_ABBREVIATIONS.get(key, key)}={value}")
    return ", ".join(parts)


def extract_tls_info(response: httpx.Response) -> TLSInfo | None:
    """Return TLS details of the connection a response came from, if any."""
    network_stream = response.extensions.get("network_stream")
    if network_stream is None:
        return None
    try:
        ssl_object = network_stream.get_extra_info("ssl_object")
    except Exception as e:
        logger.debug("tls_info_unavailable", error=str(e), category="http")
        return None
    if ssl_object is None:
        return None
    return TLSInfo.from_ssl_object(ssl_object)
