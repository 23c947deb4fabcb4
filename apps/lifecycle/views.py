from rest_framework import serializers, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.accounts.services import (
    AccountsServiceError,
    PasswordConfirmationError,
    ConfirmationPhraseError,
    UserNotFoundError,
)
from apps.lifecycle.services import (
    build_lifecycle_manager,
    # Exceptions
    DeletionAlreadyExecutingError,
    DeletionNotScheduledError,
    AccountNotRecoverableError,
    ExportNotFoundError,
    ExportExpiredError,
)
from .serializers import (
    DeletionRequestSerializer,
    DeletionRequestResponseSerializer,
    DeletionStatusSerializer,
    RecoveryRequestSerializer,
    RecoveryResponseSerializer,
    DataExportSerializer,
)


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


class RecoveryErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()
    reason = serializers.CharField(required=False)


@extend_schema(
    request=DeletionRequestSerializer,
    responses={
        200: DeletionRequestResponseSerializer,
        400: ErrorResponseSerializer,
        409: ErrorResponseSerializer,
    },
    description=(
        "Schedule the current account for deletion after the grace period. "
        "Requires the current password and the confirmation phrase DELETE."
    ),
    tags=['account'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def request_deletion(request):
    """Schedule account deletion."""
    serializer = DeletionRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    manager = build_lifecycle_manager()
    try:
        outcome = manager.request_deletion(
            user_id=request.user.id,
            password=serializer.validated_data['password'],
            confirmation=serializer.validated_data['confirmation'],
            reason=serializer.validated_data['reason'],
            export_data=serializer.validated_data['export_data'],
        )
    except (PasswordConfirmationError, ConfirmationPhraseError) as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except UserNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except DeletionAlreadyExecutingError as e:
        return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

    response = DeletionRequestResponseSerializer({
        'message': (
            f"Your account will be deleted in {outcome.grace_period_days} days. "
            "You can recover it until then."
        ),
        'grace_period_days': outcome.grace_period_days,
        'deletion_date': outcome.record.scheduled_for,
        'export_data_included': outcome.export_data_included,
        'export_id': outcome.export.id if outcome.export else None,
        'degraded_steps': outcome.degraded_steps,
    })
    return Response(response.data)


@extend_schema(
    responses={200: DeletionStatusSerializer},
    description="Get the deletion status of the current account.",
    tags=['account'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def deletion_status(request):
    """Get account deletion status."""
    manager = build_lifecycle_manager()
    try:
        view = manager.get_status(user_id=request.user.id)
    except AccountsServiceError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    return Response(DeletionStatusSerializer(view).data)


@extend_schema(
    request=RecoveryRequestSerializer,
    responses={
        200: RecoveryResponseSerializer,
        400: RecoveryErrorResponseSerializer,
    },
    description=(
        "Cancel a scheduled deletion during the grace period. Organization "
        "and subscription changes made at request time are not restored."
    ),
    tags=['account'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def recover_account(request):
    """Recover an account scheduled for deletion."""
    serializer = RecoveryRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    manager = build_lifecycle_manager()
    try:
        outcome = manager.recover(
            user_id=request.user.id,
            reason=serializer.validated_data['reason'],
        )
    except DeletionNotScheduledError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except AccountNotRecoverableError as e:
        return Response({'error': str(e), 'reason': e.reason}, status=status.HTTP_400_BAD_REQUEST)
    except UserNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    response = RecoveryResponseSerializer({
        'message': "Account recovered successfully. Your account will not be deleted.",
        'days_remaining': outcome.days_remaining,
    })
    return Response(response.data)


@extend_schema(
    parameters=[
        OpenApiParameter(name='export_id', type=str, location=OpenApiParameter.PATH),
    ],
    responses={
        200: DataExportSerializer,
        404: ErrorResponseSerializer,
        410: ErrorResponseSerializer,
    },
    description="Download a data export created with a deletion request.",
    tags=['account'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def download_export(request, export_id):
    """Download a stored data export."""
    manager = build_lifecycle_manager()
    try:
        export = manager.get_export(user_id=request.user.id, export_id=export_id)
    except ExportNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except ExportExpiredError as e:
        return Response({'error': str(e)}, status=status.HTTP_410_GONE)

    return Response(DataExportSerializer(export).data)
