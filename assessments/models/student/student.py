from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from assessments.utils.id_generator import assign_readable_id


class Student(models.Model):
    """Enrolled student. Roster data is maintained elsewhere; results only stamp it."""

    STATUS_CHOICES = [
        ('active', 'Active'),
        ('suspended', 'Suspended'),
        ('graduated', 'Graduated'),
        ('withdrawn', 'Withdrawn'),
    ]

    id = models.CharField(
        _('student ID'),
        max_length=20,
        primary_key=True,
        editable=False,
        help_text=_('Human-readable ID like STU-001ABCDE')
    )
    admission_number = models.CharField(_('admission number'), max_length=20, unique=True)
    first_name = models.CharField(_('first name'), max_length=100)
    last_name = models.CharField(_('last name'), max_length=100)

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='student_profile',
        verbose_name=_('user account')
    )
    class_model = models.ForeignKey(
        'Class',
        on_delete=models.PROTECT,
        related_name='students',
        verbose_name=_('class')
    )
    status = models.CharField(_('status'), max_length=20, choices=STATUS_CHOICES, default='active')

    created_at = models.DateTimeField(_('created at'), auto_now_add=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    class Meta:
        verbose_name = _('Student')
        verbose_name_plural = _('Students')
        ordering = ['class_model', 'last_name', 'first_name']

    def __str__(self):
        return f"{self.full_name} ({self.admission_number})"

    def save(self, *args, **kwargs):
        assign_readable_id(self, 'STUDENT')
        super().save(*args, **kwargs)

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()
