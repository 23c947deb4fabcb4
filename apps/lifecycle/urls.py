from django.urls import path
from . import views

app_name = 'lifecycle'

urlpatterns = [
    # POST /api/account/deletion/request/   - Schedule account deletion
    # GET  /api/account/deletion/status/    - Deletion status
    # POST /api/account/deletion/recover/   - Cancel scheduled deletion
    # GET  /api/account/exports/{id}/       - Download data export
    path('deletion/request/', views.request_deletion, name='deletion-request'),
    path('deletion/status/', views.deletion_status, name='deletion-status'),
    path('deletion/recover/', views.recover_account, name='deletion-recover'),
    path('exports/<uuid:export_id>/', views.download_export, name='export-download'),
]
