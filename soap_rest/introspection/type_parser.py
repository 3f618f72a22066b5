"""
Type Parser - Converts introspected WSDL type strings into type descriptors.

Handles the two shapes a SOAP client reports:
- ``struct Name { type field; type field; }``
- ``type Name``

This is a pattern matcher, not a grammar: malformed entries and struct
fragments are dropped and counted, never raised.
"""

import logging
from typing import Dict, Iterable, Optional, Tuple

from soap_rest.schema.models import TypeDescriptor

logger = logging.getLogger(__name__)

STRUCT_PREFIX = "struct "
BODY_STRIP_CHARS = "{} \t\n\r\0\x0b"


class TypeDescriptorParser:
    """Parses raw type strings and keeps count of what it had to drop"""

    def __init__(self):
        self.dropped_entries = 0
        self.dropped_fragments = 0

    @property
    def dropped(self) -> int:
        """Total number of entries and struct fragments dropped so far"""
        return self.dropped_entries + self.dropped_fragments

    def reset_diagnostics(self) -> None:
        self.dropped_entries = 0
        self.dropped_fragments = 0

    def parse(self, raw: str) -> Optional[Tuple[str, TypeDescriptor]]:
        """
        Parse one raw type string

        Args:
            raw: Type string as reported by the SOAP client

        Returns:
            Tuple of (type_name, descriptor), or None if the entry is skipped
        """
        if raw.startswith(STRUCT_PREFIX):
            return self._parse_struct(raw[len(STRUCT_PREFIX):])

        parts = raw.split(" ")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            logger.debug(f"Dropping malformed type declaration: {raw!r}")
            self.dropped_entries += 1
            return None

        declared_type, name = parts
        return name, TypeDescriptor.scalar(name, declared_type)

    def _parse_struct(self, declaration: str) -> Optional[Tuple[str, TypeDescriptor]]:
        name, _, body = declaration.partition(" ")
        if not name:
            logger.debug("Dropping struct declaration without a name")
            self.dropped_entries += 1
            return None

        body = body.strip(BODY_STRIP_CHARS)

        fields: Dict[str, str] = {}
        for fragment in body.split(";"):
            tokens = fragment.strip().split(" ")
            if len(tokens) < 2:
                if fragment.strip():
                    logger.debug(f"Dropping malformed field in struct {name}: {fragment!r}")
                    self.dropped_fragments += 1
                continue
            fields[tokens[1].strip()] = tokens[0].strip()

        return name, TypeDescriptor.struct(name, fields)

    def parse_all(self, raws: Iterable[str]) -> Dict[str, TypeDescriptor]:
        """Parse every entry into one table, sorted by type name (last duplicate wins)"""
        structures: Dict[str, TypeDescriptor] = {}
        for raw in raws:
            parsed = self.parse(raw)
            if parsed is None:
                continue
            name, descriptor = parsed
            structures[name] = descriptor

        return dict(sorted(structures.items()))
