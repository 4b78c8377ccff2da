"""
Ward error taxonomy and the project-wide API exception handler.

Every failure a ward operation can report is an ``APIException`` with a
stable ``default_code`` so the front-end can branch on it.  Database
errors that escape a view are surfaced as :class:`StoreError`.
"""
import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class WardError(APIException):
    """Base class for ward domain failures."""


class ValidationError(WardError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid input.'
    default_code = 'validation_error'


class InvalidTransitionError(WardError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Patient is not in a state that allows this action.'
    default_code = 'invalid_transition'


class RoomUnavailableError(WardError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Labor room is already occupied.'
    default_code = 'room_unavailable'


class TemplateNotFoundError(WardError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Message template not found.'
    default_code = 'template_not_found'


class StoreError(WardError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'The data store could not complete the request.'
    default_code = 'store_error'


class NotificationError(WardError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = 'SMS notification could not be sent.'
    default_code = 'notification_failed'


def _error_code(exc) -> str:
    if isinstance(exc, WardError):
        return exc.default_code
    return getattr(exc, 'default_code', None) or 'api_error'


def api_exception_handler(exc, context):
    if isinstance(exc, DatabaseError):
        logger.error('store failure in %s: %s', context.get('view'), exc)
        exc = StoreError()
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception('unhandled error', exc_info=exc)
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': str(exc)}}, status=500)
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    return Response({'ok': False, 'error': {'code': _error_code(exc), 'message': detail}}, status=resp.status_code)
