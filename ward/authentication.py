"""
Token authentication backend.

Kept apart from the views so that DRF can import it from settings
without pulling in the view modules.
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """``Authorization: Token <key>``."""

    keyword = 'Token'
