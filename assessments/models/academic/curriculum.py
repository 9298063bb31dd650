from django.db import models
from django.utils.translation import gettext_lazy as _

from assessments.utils.id_generator import assign_readable_id
from .classes import Class


class Subject(models.Model):
    """A subject taught to one class"""

    id = models.CharField(_('id'), max_length=20, primary_key=True, editable=False)
    name = models.CharField(_('subject name'), max_length=200)
    code = models.CharField(_('subject code'), max_length=50, unique=True)
    class_model = models.ForeignKey(Class, on_delete=models.PROTECT, related_name='subjects', verbose_name=_('class'))
    order = models.PositiveSmallIntegerField(_('display order'), default=0)
    created_at = models.DateTimeField(_('created at'), auto_now_add=True)

    class Meta:
        verbose_name = _('Subject')
        verbose_name_plural = _('Subjects')
        ordering = ['class_model', 'order', 'name']

    def __str__(self):
        return f"{self.name} ({self.class_model.name})"

    def save(self, *args, **kwargs):
        assign_readable_id(self, 'SUBJECT')
        super().save(*args, **kwargs)
