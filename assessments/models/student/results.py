from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils.translation import gettext_lazy as _

from assessments.utils.grading import GRADE_LETTER_CHOICES, TERM_CHOICES, validate_academic_year
from assessments.utils.id_generator import assign_readable_id
from .student import Student


class TermResult(models.Model):
    """Aggregated result of all grade records for a student in one term"""

    id = models.CharField(_('result ID'), max_length=20, primary_key=True, editable=False)
    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name='term_results', verbose_name=_('student'))
    class_model = models.ForeignKey('Class', on_delete=models.PROTECT, related_name='term_results', verbose_name=_('class'))
    term = models.CharField(_('term'), max_length=10, choices=TERM_CHOICES)
    academic_year = models.CharField(_('academic year'), max_length=9, validators=[validate_academic_year])

    subjects = models.JSONField(
        _('subjects'),
        default=list,
        encoder=DjangoJSONEncoder,
        help_text=_('Ordered snapshot of the grade records this result was computed from')
    )
    total_marks = models.DecimalField(_('total marks'), max_digits=10, decimal_places=2, default=0)
    total_max_marks = models.DecimalField(_('total maximum marks'), max_digits=10, decimal_places=2, default=0)
    average_percentage = models.DecimalField(_('average percentage'), max_digits=5, decimal_places=2, default=0)
    overall_grade = models.CharField(_('overall grade'), max_length=1, choices=GRADE_LETTER_CHOICES, blank=True)
    overall_remarks = models.CharField(_('overall remarks'), max_length=255, blank=True)

    is_published = models.BooleanField(_('published'), default=False)
    published_at = models.DateTimeField(_('published at'), null=True, blank=True)
    published_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='term_results_published',
        verbose_name=_('published by')
    )
    aggregated_at = models.DateTimeField(_('aggregated at'), null=True, blank=True)

    created_at = models.DateTimeField(_('created at'), auto_now_add=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    class Meta:
        verbose_name = _('Term Result')
        verbose_name_plural = _('Term Results')
        ordering = ['-academic_year', 'term', 'student']
        constraints = [
            models.UniqueConstraint(
                fields=['student', 'term', 'academic_year'],
                name='unique_term_result_per_student',
            ),
        ]
        indexes = [
            models.Index(fields=['class_model', 'term', 'academic_year'], name='result_class_term_idx'),
        ]

    def __str__(self):
        return f"Result - {self.student_id} ({self.term} {self.academic_year})"

    def save(self, *args, **kwargs):
        assign_readable_id(self, 'RESULT')
        super().save(*args, **kwargs)
