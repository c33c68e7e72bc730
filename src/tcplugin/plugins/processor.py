"""Descriptor template processing.

A project may ship its own ``teamcity-plugin.xml`` template instead of an
inline descriptor. Values such as the version are injected at build time
through ``@token@`` placeholders.
"""

import logging
import re
from typing import Mapping

logger = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(r"@([A-Za-z0-9_.\-]+)@")


def process_descriptor(template: str, tokens: Mapping[str, str]) -> str:
    """Replace ``@key@`` placeholders in a descriptor template.

    Placeholders without a matching token are left untouched and logged.

    Args:
        template: Raw descriptor template text.
        tokens: Token values keyed by token name (without the ``@`` marks).

    Returns:
        str: The processed descriptor text.
    """
    unresolved = set()

    def replace(match: re.Match) -> str:
        key = match.group(1)
        if key in tokens:
            return str(tokens[key])
        unresolved.add(key)
        return match.group(0)

    result = TOKEN_PATTERN.sub(replace, template)
    if unresolved:
        logger.warning(f"Unresolved descriptor tokens: {sorted(unresolved)}")
    return result
