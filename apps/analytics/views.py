import logging

from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes
from rest_framework import generics
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response

from apps.merchants.authentication import CafeTokenAuthentication
from apps.merchants.permissions import IsMerchant
from .dashboard import MerchantDashboard
from .serializers import (
    MerchantDashboardSerializer,
    ErrorSerializer,
    TransactionFilterSerializer,
    CafeTransactionSerializer,
    CafeTransactionListSerializer,
)
from .transactions import completed_transactions, transaction_summary

logger = logging.getLogger(__name__)


@extend_schema(
    responses={
        200: MerchantDashboardSerializer,
        401: ErrorSerializer,
        403: ErrorSerializer,
    },
    description=(
        "Financial summary for the signed-in café: voucher counts, revenue, "
        "fees, balance, payout breakdown and the next payout date."
    ),
    tags=['cafes'],
)
@api_view(['GET'])
@authentication_classes([CafeTokenAuthentication])
@permission_classes([IsMerchant])
def cafe_dashboard(request):
    """Merchant dashboard - thin HTTP handler."""
    data = MerchantDashboard(request.user).build()
    logger.debug('Dashboard built for merchant %s', request.user.id)
    return Response(data)


class TransactionPagination(PageNumberPagination):
    """Pagination for the café transaction list."""
    page_size = 50
    page_size_query_param = 'limit'
    max_page_size = 100


class CafeTransactionListView(generics.ListAPIView):
    """
    Completed ledger entries of the signed-in café, newest first.

    The page carries a ``summary`` of totals per transaction type over
    the whole history, whatever the ``type`` filter.
    """

    authentication_classes = [CafeTokenAuthentication]
    permission_classes = [IsMerchant]
    serializer_class = CafeTransactionSerializer
    pagination_class = TransactionPagination

    def get_queryset(self):
        filter_serializer = TransactionFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        queryset = completed_transactions(self.request.user)
        if 'type' in params:
            queryset = queryset.filter(type=params['type'])
        return queryset

    @extend_schema(
        parameters=[
            OpenApiParameter('type', OpenApiTypes.STR, enum=['purchase', 'redemption', 'refund']),
            OpenApiParameter('page', OpenApiTypes.INT),
            OpenApiParameter('limit', OpenApiTypes.INT),
        ],
        responses={200: CafeTransactionListSerializer, 401: ErrorSerializer},
        description="List the signed-in café's completed transactions with per-type totals.",
        tags=['cafes'],
    )
    def get(self, request, *args, **kwargs):
        response = self.list(request, *args, **kwargs)
        response.data['summary'] = transaction_summary(request.user)
        return response
