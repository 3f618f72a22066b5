"""Build SOAP headers (WS-Security and generic) from header configs."""
import logging
from typing import Any, List, Optional, Tuple

from lxml import etree
from zeep.wsse.username import UsernameToken

from config import HeaderConfig

logger = logging.getLogger(__name__)

SOAP_ENV_NS = "http://schemas.xmlsoap.org/soap/envelope/"


def build_wsse_header(header: HeaderConfig) -> Optional[UsernameToken]:
    """Username token, only when both username and password are set."""
    username = header.data.get("username")
    password = header.data.get("password")
    if not username or not password:
        logger.debug("Skipping wsse header without username/password")
        return None
    return UsernameToken(username, password)


def _append_value(parent: etree._Element, namespace: str, key: str, value: Any) -> None:
    child = etree.SubElement(parent, etree.QName(namespace, str(key)).text)
    if isinstance(value, dict):
        for sub_key, sub_value in value.items():
            _append_value(child, namespace, sub_key, sub_value)
    elif isinstance(value, bool):
        child.text = "true" if value else "false"
    elif value is not None:
        child.text = str(value)


def build_generic_header(header: HeaderConfig) -> Optional[etree._Element]:
    """Header element, only when namespace, name and non-empty data are set."""
    if not header.namespace or not header.name or not header.data:
        logger.debug(f"Skipping incomplete SOAP header {header.name!r}")
        return None

    element = etree.Element(etree.QName(header.namespace, header.name).text)
    for key, value in header.data.items():
        _append_value(element, header.namespace, key, value)

    if header.must_understand:
        element.set(etree.QName(SOAP_ENV_NS, "mustUnderstand").text, "1")
    if header.actor:
        element.set(etree.QName(SOAP_ENV_NS, "actor").text, header.actor)

    return element


def build_headers(headers: List[HeaderConfig]) -> Tuple[Optional[UsernameToken], List[etree._Element]]:
    """
    Split header configs into a WS-Security token and generic header elements.

    When several wsse headers are configured the last complete one wins.
    """
    wsse = None
    elements = []
    for header in headers:
        if header.type == "wsse":
            token = build_wsse_header(header)
            if token is not None:
                wsse = token
        else:
            element = build_generic_header(header)
            if element is not None:
                elements.append(element)
    return wsse, elements
