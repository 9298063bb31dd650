from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _
from .models import (
    User,
    Class,
    Subject,
    Exam,
    Question,
    Student,
    CBTSession,
    SessionAnswer,
    ScoredOutcome,
    GradeRecord,
    TermResult,
)


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin interface for custom User model"""

    list_display = ['email', 'user_type', 'is_active', 'is_staff', 'date_joined']
    list_filter = ['user_type', 'is_active', 'is_staff', 'date_joined']
    search_fields = ['email']
    ordering = ['-date_joined']

    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        (_('User Info'), {'fields': ('user_type',)}),
        (_('Permissions'), {'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions')}),
        (_('Important dates'), {'fields': ('last_login', 'date_joined')}),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'user_type', 'password1', 'password2'),
        }),
    )

    readonly_fields = ['date_joined', 'last_login']


@admin.register(Class)
class ClassAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'grade_level', 'class_staff', 'order']
    search_fields = ['name', 'class_code']
    ordering = ['order', 'name']


@admin.register(Subject)
class SubjectAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'code', 'class_model', 'order']
    list_filter = ['class_model']
    search_fields = ['name', 'code']


class QuestionInline(admin.TabularInline):
    model = Question
    extra = 0
    fields = ['ordinal', 'question_text', 'options', 'correct_option']


@admin.register(Exam)
class ExamAdmin(admin.ModelAdmin):
    list_display = ['id', 'title', 'subject', 'term', 'academic_year', 'duration_minutes', 'pass_mark', 'status']
    list_filter = ['status', 'term', 'academic_year', 'allow_retake']
    search_fields = ['id', 'title', 'subject__name']
    readonly_fields = ['id', 'created_at', 'updated_at']
    inlines = [QuestionInline]


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ['id', 'admission_number', 'first_name', 'last_name', 'class_model', 'status']
    list_filter = ['status', 'class_model']
    search_fields = ['id', 'admission_number', 'first_name', 'last_name']


class SessionAnswerInline(admin.TabularInline):
    model = SessionAnswer
    extra = 0
    readonly_fields = ['question', 'selected_option', 'answered_at', 'updated_at']
    can_delete = False


@admin.register(CBTSession)
class CBTSessionAdmin(admin.ModelAdmin):
    list_display = ['id', 'student', 'exam', 'state', 'started_at', 'deadline', 'submitted_at']
    list_filter = ['state', 'exam']
    search_fields = ['id', 'student__admission_number', 'exam__title']
    readonly_fields = ['id', 'exam', 'student', 'started_at', 'deadline', 'state', 'submitted_at', 'created_at', 'updated_at']
    inlines = [SessionAnswerInline]


@admin.register(ScoredOutcome)
class ScoredOutcomeAdmin(admin.ModelAdmin):
    """Outcomes are written once by scoring and never edited"""

    list_display = ['session', 'student', 'exam', 'raw_correct_count', 'total_questions', 'percentage', 'passed', 'auto_submitted']
    list_filter = ['passed', 'auto_submitted', 'exam']
    search_fields = ['session__id', 'student__admission_number']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(GradeRecord)
class GradeRecordAdmin(admin.ModelAdmin):
    list_display = ['id', 'student', 'subject', 'term', 'academic_year', 'marks', 'max_marks', 'percentage', 'letter_grade', 'source', 'is_published']
    list_filter = ['term', 'academic_year', 'source', 'is_published', 'letter_grade']
    search_fields = ['id', 'student__admission_number', 'subject__name']
    readonly_fields = ['id', 'percentage', 'letter_grade', 'is_published', 'created_at', 'updated_at']


@admin.register(TermResult)
class TermResultAdmin(admin.ModelAdmin):
    list_display = ['id', 'student', 'class_model', 'term', 'academic_year', 'average_percentage', 'overall_grade', 'is_published', 'published_at']
    list_filter = ['term', 'academic_year', 'is_published', 'overall_grade']
    search_fields = ['id', 'student__admission_number']
    readonly_fields = [
        'id', 'subjects', 'total_marks', 'total_max_marks', 'average_percentage', 'overall_grade',
        'overall_remarks', 'is_published', 'published_at', 'published_by', 'aggregated_at',
        'created_at', 'updated_at',
    ]
