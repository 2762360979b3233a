import re
import html
from typing import Optional

_SCRIPT_TAG = re.compile(r'<script.*?>.*?</script>', flags=re.DOTALL | re.IGNORECASE)


def sanitize_input(text: Optional[str]) -> Optional[str]:
    """Escape free text (names, ledger descriptions) before it is stored and echoed back to the dashboard."""
    if not isinstance(text, str):
        return text
    # Strip script blocks before escaping, otherwise the escaped form survives
    cleaned = _SCRIPT_TAG.sub('', text).strip()
    return html.escape(cleaned, quote=False)
