from django.core.management.base import BaseCommand
from django.utils import timezone

from assessments.models import CBTSession
from assessments.services.cbt_session import CBTSessionService


class Command(BaseCommand):
    help = 'Expire active CBT sessions past their deadline and score them from the last recorded answers'

    def add_arguments(self, parser):
        parser.add_argument('--exam', dest='exam_id', help='Only sweep sessions of this exam')
        parser.add_argument('--dry-run', action='store_true', help='List overdue sessions without expiring them')

    def handle(self, *args, **options):
        now = timezone.now()
        exam_id = options.get('exam_id')

        if options['dry_run']:
            overdue = CBTSession.objects.filter(
                state=CBTSession.STATE_ACTIVE,
                deadline__lt=now - CBTSessionService.grace_period(),
            )
            if exam_id:
                overdue = overdue.filter(exam_id=exam_id)
            for session in overdue:
                self.stdout.write(f'  {session.id}: {session.student_id} / {session.exam_id} (deadline {session.deadline:%Y-%m-%d %H:%M:%S})')
            self.stdout.write(self.style.WARNING(f'{overdue.count()} overdue session(s) would be expired'))
            return

        outcomes = CBTSessionService.expire_overdue(now=now, exam_id=exam_id)
        for outcome in outcomes:
            self.stdout.write(f'  {outcome.session_id}: {outcome.raw_correct_count}/{outcome.total_questions} ({outcome.percentage}%)')
        self.stdout.write(self.style.SUCCESS(f'Expired {len(outcomes)} CBT session(s)'))
