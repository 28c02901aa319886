"""Shared CSV export utilities."""
import csv
from datetime import datetime

from django.http import HttpResponse
from django.utils import timezone


def _resolve(obj, field):
    if callable(field):
        return field(obj)
    if '__' in field:
        # Related field lookups
        value = obj
        for part in field.split('__'):
            value = getattr(value, part, '') if value is not None else ''
        return value
    # Use get_FOO_display() for choice fields if available
    display_method = f'get_{field}_display'
    if hasattr(obj, display_method):
        return getattr(obj, display_method)()
    return getattr(obj, field, '')


def format_cell(value):
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'Yes' if value else 'No'
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        return value.strftime('%d/%m/%Y %H:%M')
    if isinstance(value, (list, tuple)):
        return '; '.join(str(item) for item in value)
    return value


def export_queryset_csv(queryset, columns, filename):
    """
    Export a queryset to CSV.

    Args:
        queryset: Django queryset to export
        columns: list of (header, field) pairs; field is an attribute name,
            a double-underscore lookup or a callable taking the object
        filename: output filename (without .csv)

    Returns:
        HttpResponse with CSV content
    """
    response = HttpResponse(content_type='text/csv')
    response['Content-Disposition'] = f'attachment; filename="{filename}.csv"'
    response.write('\ufeff')  # BOM for Excel UTF-8

    writer = csv.writer(response)
    writer.writerow([header for header, _ in columns])
    for obj in queryset:
        writer.writerow([format_cell(_resolve(obj, field)) for _, field in columns])
    return response
