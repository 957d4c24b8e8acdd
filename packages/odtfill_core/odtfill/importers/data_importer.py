"""

Data importers for JSON and XML placeholder data.

Both formats load into a plain mapping that ``models.values.flatten`` turns
into placeholder values. XML is normalised as follows:
- repeated sibling elements become an array of records
- an element with children becomes a record, or an array when it sits
  directly under the root and all of its children share one name
- a leaf element becomes its text
"""

import json
import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..media.fetcher import ResourceFetcher
from ..utils.exceptions import DataFormatError

logger = logging.getLogger(__name__)


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _text(element: ET.Element) -> str:
    return "".join(element.itertext())


def parse_json(text: Union[str, bytes], source: Optional[str] = None) -> Dict[str, Any]:
    """
    Parse JSON placeholder data.

    Args:
        text: JSON document
        source: Name of the data source, for error messages

    Returns:
        Root object

    Raises:
        DataFormatError: If the document is invalid or its root is not an object
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DataFormatError(f"Invalid JSON data: {e}", source=source, cause=e) from e

    if not isinstance(data, dict):
        raise DataFormatError(
            f"JSON data root must be an object, got {type(data).__name__}", source=source
        )
    return data


def parse_xml(text: Union[str, bytes], source: Optional[str] = None) -> Dict[str, Any]:
    """
    Parse XML placeholder data.

    Args:
        text: XML document
        source: Name of the data source, for error messages

    Returns:
        Normalised mapping of the root's children

    Raises:
        DataFormatError: If the document is not well-formed
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise DataFormatError(f"Invalid XML data: {e}", source=source, cause=e) from e

    data: Dict[str, Any] = {}
    for name, elements in _group_children(root).items():
        if len(elements) > 1:
            data[name] = [_element_value(el) for el in elements]
            continue

        element = elements[0]
        children = list(element)
        if not children:
            data[name] = _text(element)
        elif len({child.tag for child in children}) == 1:
            data[name] = [_element_value(child) for child in children]
        else:
            data[name] = element_to_dict(element)
    return data


def element_to_dict(element: ET.Element) -> Dict[str, Any]:
    """Convert an element's children into a record."""
    record: Dict[str, Any] = {}
    for name, elements in _group_children(element).items():
        if len(elements) > 1:
            record[name] = [_element_value(el) for el in elements]
        else:
            record[name] = _element_value(elements[0])
    return record


def _element_value(element: ET.Element) -> Any:
    # Leaves keep their text so repeated leaf siblings stay usable as rows.
    if len(element):
        return element_to_dict(element)
    return _text(element)


def _group_children(element: ET.Element) -> Dict[str, List[ET.Element]]:
    groups: Dict[str, List[ET.Element]] = {}
    for child in element:
        if not isinstance(child.tag, str):
            continue
        groups.setdefault(_local_name(child.tag), []).append(child)
    return groups


def load_data(
    locator: Union[str, Path],
    data_format: Optional[str] = None,
    fetcher: Optional[ResourceFetcher] = None,
) -> Dict[str, Any]:
    """
    Load placeholder data from a local path or ``https://`` URL.

    Args:
        locator: Data file path or URL
        data_format: ``"json"`` or ``"xml"``; guessed from the extension when omitted
        fetcher: Fetcher used to read the bytes

    Returns:
        Data mapping
    """
    locator = str(locator)
    if data_format is None:
        data_format = "xml" if locator.lower().endswith(".xml") else "json"
    data_format = data_format.lower()
    if data_format not in ("json", "xml"):
        raise DataFormatError(f"Unsupported data format: {data_format}", source=locator)

    fetcher = fetcher or ResourceFetcher()
    payload = fetcher.fetch(locator)
    logger.debug(f"Loading {data_format.upper()} data from {locator}")

    if data_format == "xml":
        return parse_xml(payload, source=locator)
    return parse_json(payload, source=locator)
