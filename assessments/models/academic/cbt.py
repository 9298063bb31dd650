from django.db import models
from django.utils.translation import gettext_lazy as _

from assessments.utils.id_generator import assign_readable_id
from .exams import Exam, Question


class CBTSession(models.Model):
    """One student's timed attempt at one exam"""

    STATE_ACTIVE = 'active'
    STATE_SUBMITTED = 'submitted'
    STATE_EXPIRED = 'expired'

    STATE_CHOICES = [
        (STATE_ACTIVE, 'Active'),
        (STATE_SUBMITTED, 'Submitted'),
        (STATE_EXPIRED, 'Expired'),
    ]

    id = models.CharField(_('session ID'), max_length=20, primary_key=True, editable=False)
    exam = models.ForeignKey(Exam, on_delete=models.PROTECT, related_name='sessions', verbose_name=_('exam'))
    student = models.ForeignKey('Student', on_delete=models.CASCADE, related_name='cbt_sessions', verbose_name=_('student'))

    started_at = models.DateTimeField(_('started at'))
    deadline = models.DateTimeField(_('deadline'), editable=False)
    state = models.CharField(_('state'), max_length=20, choices=STATE_CHOICES, default=STATE_ACTIVE)
    submitted_at = models.DateTimeField(_('submitted at'), blank=True, null=True)

    created_at = models.DateTimeField(_('created at'), auto_now_add=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    class Meta:
        verbose_name = _('CBT Session')
        verbose_name_plural = _('CBT Sessions')
        ordering = ['-started_at']
        constraints = [
            models.UniqueConstraint(
                fields=['student', 'exam'],
                condition=models.Q(state='active'),
                name='unique_active_cbt_session',
            ),
        ]
        indexes = [
            models.Index(fields=['student', 'exam'], name='cbt_session_student_exam_idx'),
            models.Index(fields=['state', 'deadline'], name='cbt_session_state_deadline_idx'),
        ]

    def __str__(self):
        return f"{self.id} - {self.student_id} / {self.exam_id} ({self.state})"

    def save(self, *args, **kwargs):
        assign_readable_id(self, 'CBT_SESSION')
        super().save(*args, **kwargs)

    @property
    def is_active(self):
        return self.state == self.STATE_ACTIVE

    @property
    def is_terminal(self):
        return self.state in (self.STATE_SUBMITTED, self.STATE_EXPIRED)

    def is_past_deadline(self, now):
        return now > self.deadline

    def seconds_remaining(self, now):
        if not self.is_active:
            return 0
        return max(0, int((self.deadline - now).total_seconds()))


class SessionAnswer(models.Model):
    """Selected option for one question of a session. Last write wins."""

    session = models.ForeignKey(CBTSession, on_delete=models.CASCADE, related_name='answers', verbose_name=_('session'))
    question = models.ForeignKey(Question, on_delete=models.CASCADE, related_name='session_answers', verbose_name=_('question'))
    selected_option = models.PositiveSmallIntegerField(_('selected option index'))

    answered_at = models.DateTimeField(_('answered at'), auto_now_add=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    class Meta:
        verbose_name = _('Session Answer')
        verbose_name_plural = _('Session Answers')
        ordering = ['session', 'question__ordinal']
        unique_together = [['session', 'question']]

    def __str__(self):
        return f"{self.session_id} - Q{self.question_id}: {self.selected_option}"


class ScoredOutcome(models.Model):
    """Score of a finished session. Written once, never updated."""

    session = models.OneToOneField(CBTSession, on_delete=models.PROTECT, related_name='outcome', verbose_name=_('session'))
    exam = models.ForeignKey(Exam, on_delete=models.PROTECT, related_name='outcomes', verbose_name=_('exam'))
    student = models.ForeignKey('Student', on_delete=models.CASCADE, related_name='cbt_outcomes', verbose_name=_('student'))

    raw_correct_count = models.PositiveIntegerField(_('correct answers'))
    total_questions = models.PositiveIntegerField(_('total questions'))
    percentage = models.DecimalField(_('percentage'), max_digits=5, decimal_places=2)
    pass_threshold = models.DecimalField(_('pass threshold'), max_digits=5, decimal_places=2)
    passed = models.BooleanField(_('passed'))
    auto_submitted = models.BooleanField(
        _('auto submitted'),
        default=False,
        help_text=_('Scored from the last recorded answers after the deadline passed')
    )
    grade_record = models.ForeignKey(
        'GradeRecord',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='cbt_outcomes',
        verbose_name=_('grade record')
    )
    computed_at = models.DateTimeField(_('computed at'))

    class Meta:
        verbose_name = _('Scored Outcome')
        verbose_name_plural = _('Scored Outcomes')
        ordering = ['-computed_at']
        indexes = [
            models.Index(fields=['exam', 'student'], name='outcome_exam_student_idx'),
        ]

    def __str__(self):
        return f"{self.session_id}: {self.percentage}%"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError('Scored outcomes are immutable once created')
        super().save(*args, **kwargs)
