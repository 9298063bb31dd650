from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class Class(models.Model):
    """Represents a class arm (e.g., JSS 1A, SSS 2B)"""

    id = models.CharField(_('id'), max_length=10, primary_key=True, editable=False)
    name = models.CharField(_('class name'), max_length=50, help_text=_('e.g., JSS 1A, SSS 2B'))
    class_code = models.CharField(
        _('class code'),
        max_length=10,
        unique=True,
        help_text=_('Short code for class, e.g., SS1A, JSS2B')
    )
    grade_level = models.CharField(
        _('grade level'),
        max_length=50,
        blank=True,
        help_text=_('Grouping for arms (e.g. "JSS 1" for JSS 1A, JSS 1B)')
    )
    class_staff = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='classes_assigned',
        verbose_name=_('class staff')
    )
    order = models.PositiveSmallIntegerField(_('display order'), default=0)
    created_at = models.DateTimeField(_('created at'), auto_now_add=True)

    class Meta:
        verbose_name = _('Class')
        verbose_name_plural = _('Classes')
        ordering = ['order', 'name']

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if self.class_code and not self.id:
            self.id = self.class_code.upper()
        super().save(*args, **kwargs)
