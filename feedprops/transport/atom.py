from __future__ import annotations

import copy
from typing import Dict, List, Optional

import requests
from lxml import etree

from ..converters.xml_properties import parse_xml_root
from ..errors import ParseError, TransportError
from ..models import FeedEntry
from ..utils.logging import get_logger
from ..utils.retry import with_retries
from ..utils.transport_config import TransportConfig
from .base import FeedTransport

logger = get_logger("feedprops.transport.atom")

ATOM_NS = "http://www.w3.org/2005/Atom"
ATOM_CONTENT_TYPE = "application/atom+xml"
PAYLOAD_CONTENT_TYPE = "application/xml"

_DEFAULT_HEADERS: Dict[str, str] = {
    "Accept": f"{ATOM_CONTENT_TYPE}, {PAYLOAD_CONTENT_TYPE};q=0.9",
    "User-Agent": "feedprops/0.1",
}


def _local(element: etree._Element) -> str:
    return etree.QName(element).localname


def _child(element: etree._Element, name: str) -> Optional[etree._Element]:
    for child in element:
        if isinstance(child.tag, str) and _local(child) == name:
            return child
    return None


def _strip_namespaces(element: etree._Element) -> etree._Element:
    """Return a copy of ``element`` with every tag reduced to its local name."""
    clean = copy.deepcopy(element)
    for node in clean.iter():
        if isinstance(node.tag, str):
            node.tag = _local(node)
    etree.cleanup_namespaces(clean)
    return clean


def entry_from_element(element: etree._Element, *, url: Optional[str] = None) -> FeedEntry:
    """Build a ``FeedEntry`` from a parsed Atom ``<entry>`` element."""
    content = _child(element, "content")
    payload_el = None
    if content is not None:
        payload_el = next((c for c in content if isinstance(c.tag, str)), None)
    if payload_el is None:
        raise TransportError("Atom entry has no XML payload in <content>", url=url)

    payload = etree.tostring(_strip_namespaces(payload_el), encoding="unicode", with_tail=False)

    edit_url = None
    for child in element:
        if isinstance(child.tag, str) and _local(child) == "link" and child.get("rel") == "edit":
            edit_url = child.get("href")
            break

    def _text(name: str) -> Optional[str]:
        node = _child(element, name)
        return node.text.strip() if node is not None and node.text else None

    return FeedEntry(
        payload=payload,
        id=_text("id"),
        title=_text("title"),
        edit_url=edit_url,
        updated=_text("updated"),
    )


def entry_to_atom(entry: FeedEntry) -> bytes:
    """Wrap the entry payload in an Atom ``<entry>`` document."""
    try:
        payload_el = parse_xml_root(entry.payload)
    except ParseError as exc:
        raise TransportError(f"Entry payload is not valid XML: {exc}") from exc

    root = etree.Element(f"{{{ATOM_NS}}}entry", nsmap={"atom": ATOM_NS})
    if entry.title:
        etree.SubElement(root, f"{{{ATOM_NS}}}title").text = entry.title
    content = etree.SubElement(root, f"{{{ATOM_NS}}}content", type=PAYLOAD_CONTENT_TYPE)
    content.append(payload_el)
    return etree.tostring(root, encoding="utf-8", xml_declaration=True)


def _is_retryable(exc: Exception) -> bool:
    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return True
    return isinstance(exc, TransportError) and exc.status_code is not None and exc.status_code >= 500


class AtomFeedTransport(FeedTransport):
    """Feed transport speaking Atom over HTTP with ``requests``.

    GET, PUT and DELETE are retried on connection errors and 5xx responses;
    POST is sent once.
    """

    def __init__(self, config: Optional[TransportConfig] = None, *, session: Optional[requests.Session] = None) -> None:
        self.config = config or TransportConfig()
        self.session = session or requests.Session()
        self.session.headers.update({**_DEFAULT_HEADERS, **self.config.request_headers})

    def _request(self, method: str, url: str, *, body: Optional[bytes] = None, idempotent: bool = True) -> requests.Response:
        headers: Dict[str, str] = {}
        if body is not None:
            headers["Content-Type"] = ATOM_CONTENT_TYPE
        if method in ("PUT", "DELETE"):
            headers["If-Match"] = "*"

        def _send() -> requests.Response:
            logger.debug("%s %s", method, url)
            try:
                resp = self.session.request(method, url, data=body, headers=headers, timeout=self.config.timeout)
            except requests.RequestException as exc:
                logger.warning("%s request error for %s: %s", method, url, exc)
                raise
            if resp.status_code >= 400:
                logger.warning("%s failed (%s): %s", method, resp.status_code, url)
                raise TransportError(
                    f"{method} {url} failed with HTTP {resp.status_code}",
                    url=url,
                    status_code=resp.status_code,
                )
            return resp

        if not idempotent:
            return _send()
        return with_retries(
            _send,
            retries=self.config.retries,
            backoff=self.config.backoff,
            should_retry=_is_retryable,
            description=f"{method} {url}",
        )

    def _parse(self, resp: requests.Response, url: str, expected: str) -> etree._Element:
        try:
            root = parse_xml_root(resp.content)
        except ParseError as exc:
            raise TransportError(f"Invalid Atom document from {url}: {exc}", url=url, status_code=resp.status_code) from exc
        if _local(root) != expected:
            raise TransportError(
                f"Expected Atom <{expected}> from {url}, got <{_local(root)}>",
                url=url,
                status_code=resp.status_code,
            )
        return root

    def fetch_entry(self, url: str) -> FeedEntry:
        resp = self._request("GET", url)
        return entry_from_element(self._parse(resp, url, "entry"), url=url)

    def fetch_feed(self, url: str) -> List[FeedEntry]:
        resp = self._request("GET", url)
        root = self._parse(resp, url, "feed")
        entries = [
            entry_from_element(child, url=url)
            for child in root
            if isinstance(child.tag, str) and _local(child) == "entry"
        ]
        logger.info("Fetched %d entries from %s", len(entries), url)
        return entries

    def insert(self, url: str, entry: FeedEntry) -> FeedEntry:
        resp = self._request("POST", url, body=entry_to_atom(entry), idempotent=False)
        return self._stored_entry(resp, url, entry)

    def update(self, url: str, entry: FeedEntry) -> FeedEntry:
        resp = self._request("PUT", url, body=entry_to_atom(entry))
        return self._stored_entry(resp, url, entry)

    def delete(self, url: str) -> None:
        self._request("DELETE", url)

    def _stored_entry(self, resp: requests.Response, url: str, sent: FeedEntry) -> FeedEntry:
        # Servers may answer a write with an empty body
        if not resp.content or not resp.content.strip():
            return sent
        return entry_from_element(self._parse(resp, url, "entry"), url=url)
