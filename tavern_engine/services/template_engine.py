"""
Template engine for context templates.

Replaces ``{{name}}`` placeholders (whitespace inside the braces allowed)
with values from a variable mapping. Unknown placeholders render as an
empty string so a preset never leaks raw macro syntax into a prompt.
"""

import re
from typing import Mapping, Optional

TEMPLATE_RE = re.compile(r"\{\{\s*([a-zA-Z0-9_]+)\s*\}\}")


def apply_template(template: Optional[str], variables: Mapping[str, str]) -> str:
    """
    Render a template string.
    
    Args:
        template: Text containing ``{{name}}`` placeholders
        variables: Placeholder name to replacement text
        
    Returns:
        Rendered text
    """
    if not template:
        return ""
    return TEMPLATE_RE.sub(lambda match: variables.get(match.group(1), "") or "", template)
