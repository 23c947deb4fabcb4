# ==========================================
# apps/contracts/models.py
# ==========================================

from django.db import models
import uuid


class ContractStatus(models.TextChoices):
    UPLOADED = 'uploaded', 'Uploaded'
    PROCESSING = 'processing', 'Processing'
    ANALYZED = 'analyzed', 'Analyzed'
    FAILED = 'failed', 'Failed'


class AnalysisStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    COMPLETED = 'completed', 'Completed'
    FAILED = 'failed', 'Failed'


class Contract(models.Model):
    """Uploaded contract owned by a single user."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='contracts')
    file_name = models.CharField(max_length=255)
    contract_type = models.CharField(max_length=100, blank=True)
    status = models.CharField(max_length=20, choices=ContractStatus.choices, default=ContractStatus.UPLOADED)
    storage_key = models.CharField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'contracts'
        indexes = [
            models.Index(fields=['user', 'created_at'], name='contracts_user_created_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return self.file_name


class AnalysisResult(models.Model):
    """Result of one analysis run over a contract."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    contract = models.ForeignKey(Contract, on_delete=models.CASCADE, related_name='analysis_results')
    status = models.CharField(max_length=20, choices=AnalysisStatus.choices, default=AnalysisStatus.PENDING)
    summary = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'analysis_results'
        ordering = ['-created_at']

    def __str__(self):
        return f"Analysis of {self.contract.file_name} ({self.status})"
