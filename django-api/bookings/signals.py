"""Django signals for cache invalidation."""

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from bookings.cache import invalidate_template_cache
from bookings.models import EventTemplate


@receiver([post_save, post_delete], sender=EventTemplate)
def invalidate_occurrence_cache(sender, instance, **kwargs):
    """Drop cached occurrences when a template is saved or deleted."""
    invalidate_template_cache(str(instance.pk))
