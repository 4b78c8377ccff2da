"""
Delivery notification templates.

:func:`render` is a pure function: it performs a single pass over the
template text and replaces every ``{{name}}`` token whose name is one of
:data:`PLACEHOLDERS` and whose value is known.  Anything else, including
unknown names and recognised names without a value, is left verbatim.
Substituted values are not scanned again, so a patient called
``{{babyGender}}`` stays literally that.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Mapping, Optional, Union

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from ward.exceptions import TemplateNotFoundError
from ward.models import ActivityLog, MessageTemplate, Patient
from ward.services.audit import record_activity
from ward.services.broadcast import publish_change
from ward.services.sanitize import clean_text

logger = logging.getLogger(__name__)

PLACEHOLDERS = ('patientName', 'nextOfKinName', 'nextOfKinPhone', 'babyGender', 'deliveryTime')
PLACEHOLDER_RE = re.compile(r'\{\{(\w+)\}\}')


def format_delivery_time(moment: Optional[datetime] = None) -> str:
    moment = moment or timezone.now()
    if timezone.is_aware(moment):
        moment = timezone.localtime(moment)
    return moment.strftime(settings.DELIVERY_TIME_FORMAT)


def placeholder_values(patient: Optional[Patient], context: Optional[Mapping[str, object]] = None) -> dict:
    values: dict[str, object] = {}
    if patient is not None:
        values.update({
            'patientName': patient.full_name,
            'nextOfKinName': patient.next_of_kin_name,
            'nextOfKinPhone': patient.next_of_kin_phone,
            'babyGender': patient.baby_gender or None,
        })
    for key, value in (context or {}).items():
        if key in PLACEHOLDERS and value is not None:
            values[key] = value
    if values.get('deliveryTime') is None:
        values['deliveryTime'] = format_delivery_time()
    elif isinstance(values['deliveryTime'], datetime):
        values['deliveryTime'] = format_delivery_time(values['deliveryTime'])
    return values


def render(template: Union[MessageTemplate, str], patient: Optional[Patient], context: Optional[Mapping[str, object]] = None) -> str:
    content = template.content if isinstance(template, MessageTemplate) else template
    values = placeholder_values(patient, context)

    def _sub(match: re.Match) -> str:
        name = match.group(1)
        value = values.get(name)
        if name not in PLACEHOLDERS or value in (None, ''):
            return match.group(0)
        return str(value)

    return PLACEHOLDER_RE.sub(_sub, content or '')


def resolve_template(template_id) -> MessageTemplate:
    """Return the active template ``template_id`` or raise :class:`TemplateNotFoundError`."""
    if not template_id:
        raise TemplateNotFoundError()
    try:
        return MessageTemplate.objects.get(id=template_id, is_active=True)
    except (MessageTemplate.DoesNotExist, ValueError, TypeError):
        raise TemplateNotFoundError(f'message template {template_id} not found')


def list_templates(*, active_only: bool = False) -> list[MessageTemplate]:
    qs = MessageTemplate.objects.select_related('created_by')
    if active_only:
        qs = qs.filter(is_active=True)
    return list(qs.order_by('-created_at', '-id'))


def _locked_template(template_id) -> MessageTemplate:
    try:
        return MessageTemplate.objects.select_for_update().get(id=template_id)
    except (MessageTemplate.DoesNotExist, ValueError, TypeError):
        raise TemplateNotFoundError(f'message template {template_id} not found')


@transaction.atomic
def create_template(actor, *, name: str, content: str, is_active: bool = True) -> MessageTemplate:
    tpl = MessageTemplate.objects.create(
        name=clean_text(name, 'name'),
        content=clean_text(content, 'content'),
        is_active=is_active,
        created_by=actor,
    )
    record_activity(user=actor, action=ActivityLog.Action.TEMPLATE_CREATED,
                    details=f'Template "{tpl.name}" created')
    publish_change('template', tpl.id)
    logger.info('template %s created by %s', tpl.id, getattr(actor, 'username', None))
    return tpl


@transaction.atomic
def update_template(actor, template_id, *, name: Optional[str] = None, content: Optional[str] = None,
                    is_active: Optional[bool] = None) -> MessageTemplate:
    tpl = _locked_template(template_id)
    changed = []
    if name is not None:
        tpl.name = clean_text(name, 'name')
        changed.append('name')
    if content is not None:
        tpl.content = clean_text(content, 'content')
        changed.append('content')
    if is_active is not None and is_active != tpl.is_active:
        tpl.is_active = is_active
        changed.append('activated' if is_active else 'deactivated')
    if not changed:
        return tpl
    tpl.save()
    record_activity(user=actor, action=ActivityLog.Action.TEMPLATE_UPDATED,
                    details=f'Template "{tpl.name}" updated: {", ".join(changed)}')
    publish_change('template', tpl.id)
    return tpl


def deactivate_template(actor, template_id) -> MessageTemplate:
    return update_template(actor, template_id, is_active=False)


def format_template(tpl: MessageTemplate) -> dict:
    return {
        'id': tpl.id,
        'name': tpl.name,
        'content': tpl.content,
        'isActive': tpl.is_active,
        'createdBy': tpl.created_by_id,
        'createdAt': tpl.created_at.isoformat() if tpl.created_at else None,
        'updatedAt': tpl.updated_at.isoformat() if tpl.updated_at else None,
    }
