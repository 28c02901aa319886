"""Celery tasks for member management."""
import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task
def import_informer_dataset(token_or_url, dataset_kind, event_id=None):
    """
    Pull one Informer dataset into the member store, optionally enrolling
    the members in the event with `event_id`.

    Intended for celery beat; see CELERY_BEAT_SCHEDULE.
    """
    from apps.events.models import Event
    from .services_import import InformerImportService

    event = Event.objects.get(pk=event_id) if event_id else None
    result = InformerImportService.import_dataset(token_or_url, dataset_kind, event=event)
    logger.info(
        f'Informer {dataset_kind} import: {result.success}/{result.total} imported, '
        f'{result.failed} failed'
    )
    return result.as_dict()


@shared_task
def import_scheduled_datasets():
    """Pull every Informer dataset that has a token configured in settings."""
    from django.conf import settings

    from apps.core.constants import InformerDataset

    scheduled = {
        InformerDataset.EMAIL_MEMBERS: settings.INFORMER_EMAIL_MEMBERS_TOKEN,
        InformerDataset.SMS_MEMBERS: settings.INFORMER_SMS_MEMBERS_TOKEN,
    }
    results = {}
    for dataset_kind, token in scheduled.items():
        if not token:
            logger.info(f'Skipping Informer {dataset_kind} import: no token configured')
            continue
        results[dataset_kind] = import_informer_dataset(token, dataset_kind)
    return results
