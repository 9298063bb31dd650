from django.urls import path
from assessments.views.grades import upload_grade, bulk_upload_grades, list_grades, delete_grade, publish_grade

urlpatterns = [
    path('', list_grades, name='list-grades'),
    path('upload', upload_grade, name='upload-grade'),
    path('bulk-upload', bulk_upload_grades, name='bulk-upload-grades'),
    path('<str:record_id>', delete_grade, name='delete-grade'),
    path('<str:record_id>/publish', publish_grade, name='publish-grade'),
]
