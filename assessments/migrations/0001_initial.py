import assessments.models.academic.exams
import assessments.models.user
import assessments.utils.grading
import django.core.serializers.json
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

TERM_CHOICES = [('term1', 'First Term'), ('term2', 'Second Term'), ('final', 'Final Term')]
GRADE_CHOICES = [('A', 'A'), ('B', 'B'), ('C', 'C'), ('D', 'D'), ('F', 'F')]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='User',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('email', models.EmailField(max_length=254, unique=True, verbose_name='email address')),
                ('user_type', models.CharField(choices=[('admin', 'Admin'), ('staff', 'Staff'), ('student', 'Student')], default='student', max_length=20, verbose_name='user type')),
                ('is_active', models.BooleanField(default=True, verbose_name='active')),
                ('is_staff', models.BooleanField(default=False, verbose_name='staff status')),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now, verbose_name='date joined')),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'verbose_name': 'User',
                'verbose_name_plural': 'Users',
                'ordering': ['-date_joined'],
            },
            managers=[
                ('objects', assessments.models.user.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name='Class',
            fields=[
                ('id', models.CharField(editable=False, max_length=10, primary_key=True, serialize=False, verbose_name='id')),
                ('name', models.CharField(help_text='e.g., JSS 1A, SSS 2B', max_length=50, verbose_name='class name')),
                ('class_code', models.CharField(help_text='Short code for class, e.g., SS1A, JSS2B', max_length=10, unique=True, verbose_name='class code')),
                ('grade_level', models.CharField(blank=True, help_text='Grouping for arms (e.g. "JSS 1" for JSS 1A, JSS 1B)', max_length=50, verbose_name='grade level')),
                ('order', models.PositiveSmallIntegerField(default=0, verbose_name='display order')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('class_staff', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='classes_assigned', to=settings.AUTH_USER_MODEL, verbose_name='class staff')),
            ],
            options={
                'verbose_name': 'Class',
                'verbose_name_plural': 'Classes',
                'ordering': ['order', 'name'],
            },
        ),
        migrations.CreateModel(
            name='Subject',
            fields=[
                ('id', models.CharField(editable=False, max_length=20, primary_key=True, serialize=False, verbose_name='id')),
                ('name', models.CharField(max_length=200, verbose_name='subject name')),
                ('code', models.CharField(max_length=50, unique=True, verbose_name='subject code')),
                ('order', models.PositiveSmallIntegerField(default=0, verbose_name='display order')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('class_model', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='subjects', to='assessments.class', verbose_name='class')),
            ],
            options={
                'verbose_name': 'Subject',
                'verbose_name_plural': 'Subjects',
                'ordering': ['class_model', 'order', 'name'],
            },
        ),
        migrations.CreateModel(
            name='Exam',
            fields=[
                ('id', models.CharField(editable=False, max_length=20, primary_key=True, serialize=False, verbose_name='exam ID')),
                ('title', models.CharField(max_length=200, verbose_name='exam title')),
                ('term', models.CharField(choices=TERM_CHOICES, max_length=10, verbose_name='term')),
                ('academic_year', models.CharField(max_length=9, validators=[assessments.utils.grading.validate_academic_year], verbose_name='academic year')),
                ('duration_minutes', models.PositiveIntegerField(verbose_name='duration (minutes)')),
                ('total_questions', models.PositiveIntegerField(default=0, verbose_name='total questions')),
                ('pass_mark', models.PositiveSmallIntegerField(default=assessments.models.academic.exams.default_pass_mark, verbose_name='pass mark (%)')),
                ('allow_retake', models.BooleanField(default=False, verbose_name='allow retake')),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('active', 'Active'), ('closed', 'Closed')], default='draft', max_length=20, verbose_name='status')),
                ('instructions', models.TextField(blank=True, verbose_name='instructions')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_exams', to=settings.AUTH_USER_MODEL, verbose_name='created by')),
                ('exam_class', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='exams', to='assessments.class', verbose_name='exam class')),
                ('subject', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='exams', to='assessments.subject', verbose_name='subject')),
            ],
            options={
                'verbose_name': 'Exam',
                'verbose_name_plural': 'Exams',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['subject', 'term', 'academic_year'], name='exam_subject_term_idx'),
                    models.Index(fields=['status', 'created_at'], name='exam_status_created_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Question',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('ordinal', models.PositiveIntegerField(verbose_name='ordinal')),
                ('question_text', models.TextField(verbose_name='question text')),
                ('options', models.JSONField(default=list, verbose_name='options')),
                ('correct_option', models.PositiveSmallIntegerField(verbose_name='correct option index')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('exam', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='questions', to='assessments.exam', verbose_name='exam')),
            ],
            options={
                'verbose_name': 'Question',
                'verbose_name_plural': 'Questions',
                'ordering': ['exam', 'ordinal'],
                'unique_together': {('exam', 'ordinal')},
            },
        ),
        migrations.CreateModel(
            name='Student',
            fields=[
                ('id', models.CharField(editable=False, help_text='Human-readable ID like STU-001ABCDE', max_length=20, primary_key=True, serialize=False, verbose_name='student ID')),
                ('admission_number', models.CharField(max_length=20, unique=True, verbose_name='admission number')),
                ('first_name', models.CharField(max_length=100, verbose_name='first name')),
                ('last_name', models.CharField(max_length=100, verbose_name='last name')),
                ('status', models.CharField(choices=[('active', 'Active'), ('suspended', 'Suspended'), ('graduated', 'Graduated'), ('withdrawn', 'Withdrawn')], default='active', max_length=20, verbose_name='status')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('class_model', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='students', to='assessments.class', verbose_name='class')),
                ('user', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='student_profile', to=settings.AUTH_USER_MODEL, verbose_name='user account')),
            ],
            options={
                'verbose_name': 'Student',
                'verbose_name_plural': 'Students',
                'ordering': ['class_model', 'last_name', 'first_name'],
            },
        ),
        migrations.CreateModel(
            name='GradeRecord',
            fields=[
                ('id', models.CharField(editable=False, max_length=20, primary_key=True, serialize=False, verbose_name='grade ID')),
                ('source', models.CharField(choices=[('cbt', 'CBT (system scored)'), ('manual', 'Manual entry')], default='manual', max_length=10, verbose_name='source')),
                ('term', models.CharField(choices=TERM_CHOICES, max_length=10, verbose_name='term')),
                ('academic_year', models.CharField(max_length=9, validators=[assessments.utils.grading.validate_academic_year], verbose_name='academic year')),
                ('marks', models.DecimalField(decimal_places=2, max_digits=7, verbose_name='marks')),
                ('max_marks', models.DecimalField(decimal_places=2, max_digits=7, verbose_name='maximum marks')),
                ('percentage', models.DecimalField(decimal_places=2, editable=False, max_digits=5, verbose_name='percentage')),
                ('letter_grade', models.CharField(choices=GRADE_CHOICES, editable=False, max_length=1, verbose_name='letter grade')),
                ('remarks', models.TextField(blank=True, verbose_name='remarks')),
                ('is_published', models.BooleanField(default=False, help_text='Sealed by the published term result that includes it', verbose_name='published')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('class_model', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='grade_records', to='assessments.class', verbose_name='class')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='grade_records', to='assessments.student', verbose_name='student')),
                ('subject', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='grade_records', to='assessments.subject', verbose_name='subject')),
                ('teacher', models.ForeignKey(blank=True, help_text='Empty when the record was written by CBT scoring', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='grade_records_entered', to=settings.AUTH_USER_MODEL, verbose_name='teacher')),
            ],
            options={
                'verbose_name': 'Grade Record',
                'verbose_name_plural': 'Grade Records',
                'ordering': ['student', 'subject__order', 'subject__name'],
                'indexes': [
                    models.Index(fields=['student', 'term', 'academic_year'], name='grade_student_term_idx'),
                    models.Index(fields=['class_model', 'subject', 'term', 'academic_year'], name='grade_class_subject_term_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('student', 'subject', 'term', 'academic_year'), name='unique_grade_record_per_term'),
                ],
            },
        ),
        migrations.CreateModel(
            name='CBTSession',
            fields=[
                ('id', models.CharField(editable=False, max_length=20, primary_key=True, serialize=False, verbose_name='session ID')),
                ('started_at', models.DateTimeField(verbose_name='started at')),
                ('deadline', models.DateTimeField(editable=False, verbose_name='deadline')),
                ('state', models.CharField(choices=[('active', 'Active'), ('submitted', 'Submitted'), ('expired', 'Expired')], default='active', max_length=20, verbose_name='state')),
                ('submitted_at', models.DateTimeField(blank=True, null=True, verbose_name='submitted at')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('exam', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='sessions', to='assessments.exam', verbose_name='exam')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='cbt_sessions', to='assessments.student', verbose_name='student')),
            ],
            options={
                'verbose_name': 'CBT Session',
                'verbose_name_plural': 'CBT Sessions',
                'ordering': ['-started_at'],
                'indexes': [
                    models.Index(fields=['student', 'exam'], name='cbt_session_student_exam_idx'),
                    models.Index(fields=['state', 'deadline'], name='cbt_session_state_deadline_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('state', 'active')), fields=('student', 'exam'), name='unique_active_cbt_session'),
                ],
            },
        ),
        migrations.CreateModel(
            name='SessionAnswer',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('selected_option', models.PositiveSmallIntegerField(verbose_name='selected option index')),
                ('answered_at', models.DateTimeField(auto_now_add=True, verbose_name='answered at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('question', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='session_answers', to='assessments.question', verbose_name='question')),
                ('session', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='answers', to='assessments.cbtsession', verbose_name='session')),
            ],
            options={
                'verbose_name': 'Session Answer',
                'verbose_name_plural': 'Session Answers',
                'ordering': ['session', 'question__ordinal'],
                'unique_together': {('session', 'question')},
            },
        ),
        migrations.CreateModel(
            name='TermResult',
            fields=[
                ('id', models.CharField(editable=False, max_length=20, primary_key=True, serialize=False, verbose_name='result ID')),
                ('term', models.CharField(choices=TERM_CHOICES, max_length=10, verbose_name='term')),
                ('academic_year', models.CharField(max_length=9, validators=[assessments.utils.grading.validate_academic_year], verbose_name='academic year')),
                ('subjects', models.JSONField(default=list, encoder=django.core.serializers.json.DjangoJSONEncoder, help_text='Ordered snapshot of the grade records this result was computed from', verbose_name='subjects')),
                ('total_marks', models.DecimalField(decimal_places=2, default=0, max_digits=10, verbose_name='total marks')),
                ('total_max_marks', models.DecimalField(decimal_places=2, default=0, max_digits=10, verbose_name='total maximum marks')),
                ('average_percentage', models.DecimalField(decimal_places=2, default=0, max_digits=5, verbose_name='average percentage')),
                ('overall_grade', models.CharField(blank=True, choices=GRADE_CHOICES, max_length=1, verbose_name='overall grade')),
                ('overall_remarks', models.CharField(blank=True, max_length=255, verbose_name='overall remarks')),
                ('is_published', models.BooleanField(default=False, verbose_name='published')),
                ('published_at', models.DateTimeField(blank=True, null=True, verbose_name='published at')),
                ('aggregated_at', models.DateTimeField(blank=True, null=True, verbose_name='aggregated at')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('class_model', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='term_results', to='assessments.class', verbose_name='class')),
                ('published_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='term_results_published', to=settings.AUTH_USER_MODEL, verbose_name='published by')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='term_results', to='assessments.student', verbose_name='student')),
            ],
            options={
                'verbose_name': 'Term Result',
                'verbose_name_plural': 'Term Results',
                'ordering': ['-academic_year', 'term', 'student'],
                'indexes': [
                    models.Index(fields=['class_model', 'term', 'academic_year'], name='result_class_term_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('student', 'term', 'academic_year'), name='unique_term_result_per_student'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ScoredOutcome',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('raw_correct_count', models.PositiveIntegerField(verbose_name='correct answers')),
                ('total_questions', models.PositiveIntegerField(verbose_name='total questions')),
                ('percentage', models.DecimalField(decimal_places=2, max_digits=5, verbose_name='percentage')),
                ('pass_threshold', models.DecimalField(decimal_places=2, max_digits=5, verbose_name='pass threshold')),
                ('passed', models.BooleanField(verbose_name='passed')),
                ('auto_submitted', models.BooleanField(default=False, help_text='Scored from the last recorded answers after the deadline passed', verbose_name='auto submitted')),
                ('computed_at', models.DateTimeField(verbose_name='computed at')),
                ('exam', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='outcomes', to='assessments.exam', verbose_name='exam')),
                ('grade_record', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='cbt_outcomes', to='assessments.graderecord', verbose_name='grade record')),
                ('session', models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name='outcome', to='assessments.cbtsession', verbose_name='session')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='cbt_outcomes', to='assessments.student', verbose_name='student')),
            ],
            options={
                'verbose_name': 'Scored Outcome',
                'verbose_name_plural': 'Scored Outcomes',
                'ordering': ['-computed_at'],
                'indexes': [
                    models.Index(fields=['exam', 'student'], name='outcome_exam_student_idx'),
                ],
            },
        ),
    ]
