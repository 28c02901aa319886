"""Celery tasks for BMM campaigns."""
import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task
def send_region_invitations(event_id, region_desc):
    from .services_campaign import BmmCampaignService

    result = BmmCampaignService().send_invitations_by_region(event_id, region_desc)
    logger.info(f"Invitations for {region_desc}: {result.success}/{result.total} sent")
    return result.as_dict()


@shared_task
def send_confirmation_requests(event_id):
    from .services_campaign import BmmCampaignService

    result = BmmCampaignService().send_confirmation_requests(event_id)
    logger.info(f"Confirmation requests: {result.success}/{result.total} sent")
    return result.as_dict()


@shared_task
def send_special_vote_links(event_id):
    from .services_campaign import BmmCampaignService

    result = BmmCampaignService().send_special_vote_links(event_id)
    logger.info(f"Special vote links: {result.success}/{result.total} sent")
    return result.as_dict()


@shared_task
def send_tickets(event_id):
    from .services_campaign import BmmCampaignService

    result = BmmCampaignService().send_tickets(event_id)
    logger.info(f"Tickets: {result.success}/{result.total} sent")
    return result.as_dict()
