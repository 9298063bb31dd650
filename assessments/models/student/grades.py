from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from assessments.utils.grading import (
    GRADE_LETTER_CHOICES,
    TERM_CHOICES,
    letter_grade_for,
    round_percentage,
    validate_academic_year,
)
from assessments.utils.id_generator import assign_readable_id
from .student import Student


class GradeRecord(models.Model):
    """One scored outcome per student, subject, term and academic year"""

    SOURCE_CBT = 'cbt'
    SOURCE_MANUAL = 'manual'
    SOURCE_CHOICES = [
        (SOURCE_CBT, 'CBT (system scored)'),
        (SOURCE_MANUAL, 'Manual entry'),
    ]

    id = models.CharField(_('grade ID'), max_length=20, primary_key=True, editable=False)
    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name='grade_records', verbose_name=_('student'))
    subject = models.ForeignKey('Subject', on_delete=models.PROTECT, related_name='grade_records', verbose_name=_('subject'))
    class_model = models.ForeignKey('Class', on_delete=models.PROTECT, related_name='grade_records', verbose_name=_('class'))
    teacher = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='grade_records_entered',
        verbose_name=_('teacher'),
        help_text=_('Empty when the record was written by CBT scoring')
    )
    source = models.CharField(_('source'), max_length=10, choices=SOURCE_CHOICES, default=SOURCE_MANUAL)

    term = models.CharField(_('term'), max_length=10, choices=TERM_CHOICES)
    academic_year = models.CharField(_('academic year'), max_length=9, validators=[validate_academic_year])

    marks = models.DecimalField(_('marks'), max_digits=7, decimal_places=2)
    max_marks = models.DecimalField(_('maximum marks'), max_digits=7, decimal_places=2)
    percentage = models.DecimalField(_('percentage'), max_digits=5, decimal_places=2, editable=False)
    letter_grade = models.CharField(_('letter grade'), max_length=1, choices=GRADE_LETTER_CHOICES, editable=False)
    remarks = models.TextField(_('remarks'), blank=True)

    is_published = models.BooleanField(
        _('published'),
        default=False,
        help_text=_('Sealed by the published term result that includes it')
    )

    created_at = models.DateTimeField(_('created at'), auto_now_add=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    class Meta:
        verbose_name = _('Grade Record')
        verbose_name_plural = _('Grade Records')
        ordering = ['student', 'subject__order', 'subject__name']
        constraints = [
            models.UniqueConstraint(
                fields=['student', 'subject', 'term', 'academic_year'],
                name='unique_grade_record_per_term',
            ),
        ]
        indexes = [
            models.Index(fields=['student', 'term', 'academic_year'], name='grade_student_term_idx'),
            models.Index(fields=['class_model', 'subject', 'term', 'academic_year'], name='grade_class_subject_term_idx'),
        ]

    def __str__(self):
        return f"{self.student_id} - {self.subject_id} {self.term} {self.academic_year}: {self.marks}/{self.max_marks}"

    def save(self, *args, **kwargs):
        assign_readable_id(self, 'GRADE')
        self.percentage = round_percentage(self.marks, self.max_marks)
        self.letter_grade = letter_grade_for(self.percentage)
        super().save(*args, **kwargs)
