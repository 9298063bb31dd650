from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils.translation import gettext_lazy as _

from assessments.utils.grading import TERM_CHOICES, validate_academic_year
from assessments.utils.id_generator import assign_readable_id
from .classes import Class
from .curriculum import Subject


def default_pass_mark():
    return getattr(settings, 'CBT_DEFAULT_PASS_MARK', 50)


class Exam(models.Model):
    """CBT exam definition. Read-only to the assessment core."""

    STATUS_CHOICES = [('draft', 'Draft'), ('active', 'Active'), ('closed', 'Closed')]

    id = models.CharField(_('exam ID'), max_length=20, primary_key=True, editable=False)
    title = models.CharField(_('exam title'), max_length=200)
    subject = models.ForeignKey(Subject, on_delete=models.PROTECT, related_name='exams', verbose_name=_('subject'))
    exam_class = models.ForeignKey(Class, on_delete=models.SET_NULL, null=True, blank=True, related_name='exams', verbose_name=_('exam class'))
    term = models.CharField(_('term'), max_length=10, choices=TERM_CHOICES)
    academic_year = models.CharField(_('academic year'), max_length=9, validators=[validate_academic_year])

    duration_minutes = models.PositiveIntegerField(_('duration (minutes)'))
    total_questions = models.PositiveIntegerField(_('total questions'), default=0)
    pass_mark = models.PositiveSmallIntegerField(_('pass mark (%)'), default=default_pass_mark)
    allow_retake = models.BooleanField(_('allow retake'), default=False)

    status = models.CharField(_('status'), max_length=20, choices=STATUS_CHOICES, default='draft')
    instructions = models.TextField(_('instructions'), blank=True)

    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='created_exams', verbose_name=_('created by'))
    created_at = models.DateTimeField(_('created at'), auto_now_add=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    class Meta:
        verbose_name = _('Exam')
        verbose_name_plural = _('Exams')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['subject', 'term', 'academic_year'], name='exam_subject_term_idx'),
            models.Index(fields=['status', 'created_at'], name='exam_status_created_idx'),
        ]

    def __str__(self):
        return f"{self.title} ({self.subject.name})"

    def save(self, *args, **kwargs):
        assign_readable_id(self, 'EXAM')
        super().save(*args, **kwargs)

    def clean(self):
        super().clean()
        if self.pass_mark > 100:
            raise ValidationError(_('Pass mark is a percentage and cannot exceed 100'))
        if self.duration_minutes == 0:
            raise ValidationError(_('Duration must be at least one minute'))

    @property
    def is_active(self):
        return self.status == 'active'


class Question(models.Model):
    """Multiple-choice question belonging to one exam"""

    exam = models.ForeignKey(Exam, on_delete=models.CASCADE, related_name='questions', verbose_name=_('exam'))
    ordinal = models.PositiveIntegerField(_('ordinal'))
    question_text = models.TextField(_('question text'))
    options = models.JSONField(_('options'), default=list)
    correct_option = models.PositiveSmallIntegerField(_('correct option index'))

    created_at = models.DateTimeField(_('created at'), auto_now_add=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    class Meta:
        verbose_name = _('Question')
        verbose_name_plural = _('Questions')
        ordering = ['exam', 'ordinal']
        unique_together = [['exam', 'ordinal']]

    def __str__(self):
        return f"Q{self.ordinal} ({self.exam_id})"

    def clean(self):
        super().clean()
        if not isinstance(self.options, list) or len(self.options) < 2:
            raise ValidationError(_('A question needs at least two options'))
        if self.correct_option >= len(self.options):
            raise ValidationError(_('The correct option index does not match any option'))

    @property
    def option_count(self):
        return len(self.options or [])
