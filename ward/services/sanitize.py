import html
from typing import Optional

import bleach

from ward.exceptions import ValidationError

# entities bleach leaves in plain text that an SMS should show literally
_SMS_ENTITIES = (('&quot;', '"'), ('&#39;', "'"), ('&#x27;', "'"), ('&amp;', '&'))


def clean_text(value: Optional[str], label: str, *, required: bool = True) -> str:
    """Strip every tag (escaped ones included) and surrounding whitespace.

    ``<`` and ``>`` stay escaped in the result; only ``&`` and quotes are
    turned back into characters.
    """
    value = bleach.clean(html.unescape((value or '').strip()), tags=set(), attributes={}, strip=True)
    for entity, char in _SMS_ENTITIES:
        value = value.replace(entity, char)
    value = value.strip()
    if required and not value:
        raise ValidationError(f'{label} is required')
    return value
