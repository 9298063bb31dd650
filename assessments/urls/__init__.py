from django.urls import path, include

app_name = 'assessments'

urlpatterns = [
    # CBT sessions, submissions and exam results
    path('cbt/', include('assessments.urls.cbt')),

    # Grade records (teachers)
    path('grades/', include('assessments.urls.grades')),

    # Term result aggregation and publication
    path('term-results/', include('assessments.urls.term_results')),
]
