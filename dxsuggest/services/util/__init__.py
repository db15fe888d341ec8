"""
Shared Data Models declared here
"""
from typing import Union, List, Dict, Optional, Any, Tuple
import re

from dxsuggest.services.util.logutil import LoggingUtil
from dxsuggest.services.config import config

logger = LoggingUtil.init_logging(
    __name__,
    config.get('logging_level'),
    config.get('logging_format'),
)


DEFAULT_PROVENANCE = "infores:dxsuggest"

# Compact URI of an ontology term or diagnosis, e.g. 'HP:0002066'
CURIE_PATTERN = re.compile(r"^([A-Za-z][A-Za-z0-9_.\-]*):(\S+)$")

# Query term matched against a diagnosis: (MICA term identifier, its information content)
TERM_MATCH = Tuple[str, float]
MATCH_MAP = Dict[str, TERM_MATCH]

# Annotation metadata block of a loaded ontology or catalog document
SOURCE_META = Dict[str, Any]

# The /metadata report of the engine
ENGINE_METADATA = Dict[str, Union[str, int, None, Dict[str, SOURCE_META]]]


def parse_curie(code: Any) -> Optional[Tuple[str, str]]:
    """
    Split a '<prefix>:<id>' code into its prefix and local identifier.

    :param code: candidate CURIE, surrounding whitespace is ignored
    :return: (prefix, local id) tuple, or None if 'code' is not a well formed CURIE
    """
    if not isinstance(code, str):
        return None
    match = CURIE_PATTERN.match(code.strip())
    if not match:
        return None
    return match.group(1), match.group(2)


def normalize_curie(code: Any) -> Optional[str]:
    """Canonical '<prefix>:<id>' form of a code, or None if it is malformed."""
    parts = parse_curie(code)
    if parts is None:
        return None
    return f"{parts[0]}:{parts[1]}"


def get_nested_tag_value(data: Dict, path: List[str], pos: int) -> Optional[Any]:
    """
    Navigate dot delimited tag 'path' into a multi-level dictionary, to return its associated value.

    :param data: Dict, multi-level data dictionary
    :param path: str, dotted JSON tag path
    :param pos: int, zero-based current position in tag path
    :return: string value of the multi-level tag, if available; 'None' otherwise if no tag value found in the path
    """
    tag = path[pos]
    part_tag_path = ".".join(path[:pos+1])
    if not isinstance(data, dict) or tag not in data:
        logger.debug(f"\tMissing tag path '{part_tag_path}'?")
        return None

    pos += 1
    if pos == len(path):
        return data[tag]
    else:
        return get_nested_tag_value(data[tag], path, pos)


def tag_value(json_data, tag_path) -> Optional[Any]:
    """
    Retrieve value of leaf in multi-level dictionary at
    the end of a specified dot delimited sequence of keys.
    :param json_data: Dict, multi-level data dictionary
    :param tag_path: str, dotted key path, e.g. 'meta.version'
    :return: the value found, or None
    """
    if not tag_path:
        logger.debug(f"\tEmpty 'tag_path' argument?")
        return None

    parts = tag_path.split(".")
    return get_nested_tag_value(json_data, parts, 0)
