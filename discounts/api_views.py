import logging

import django_filters
from django.conf import settings
from django.utils import timezone
from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAdminUser, AllowAny
from rest_framework.response import Response

from .exceptions import InvalidPricingContext
from .models import Discount
from .pricing import price_for_display, to_decimal
from .pricing_context import PricingContext
from .serializers import DiscountSerializer, DiscountCreateSerializer
from .status import STATUS_CHOICES, discount_status, format_time_remaining, is_ending_soon

logger = logging.getLogger(__name__)


class DiscountPagination(PageNumberPagination):
    page_size_query_param = 'limit'
    max_page_size = 100

    def get_page_size(self, request):
        self.page_size = getattr(settings, 'DISCOUNT_API_PAGE_SIZE', 20)
        return super().get_page_size(request)


class DiscountFilter(django_filters.FilterSet):
    """Filters for the discount list: status, company, product and name search"""
    status = django_filters.ChoiceFilter(choices=STATUS_CHOICES, method='filter_status')
    company = django_filters.NumberFilter(method='filter_company')
    product = django_filters.NumberFilter(method='filter_product')
    search = django_filters.CharFilter(field_name='name', lookup_expr='icontains')

    class Meta:
        model = Discount
        fields = ['status', 'company', 'product', 'search']

    def filter_status(self, queryset, name, value):
        return queryset.with_status(value, timezone.now())

    def filter_company(self, queryset, name, value):
        return queryset.for_company(value)

    def filter_product(self, queryset, name, value):
        return queryset.for_product(value)


class DiscountViewSet(viewsets.ModelViewSet):
    """
    ViewSet for managing discounts (staff only).
    Deleting a discount retires it; the row is kept for order history.
    """
    permission_classes = [IsAdminUser]
    pagination_class = DiscountPagination
    filterset_class = DiscountFilter
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        return (
            Discount.objects.alive()
            .select_related('company', 'product', 'variant__product')
            .order_by('-created_at', '-id')
        )

    def get_serializer_class(self):
        if self.action == 'create':
            return DiscountCreateSerializer
        return DiscountSerializer

    def create(self, request, *args, **kwargs):
        """Create one or more discounts"""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        discounts = serializer.save()

        return Response({
            'message': f'Created {len(discounts)} discount(s) successfully',
            'discounts': DiscountSerializer(discounts, many=True).data,
        }, status=status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):
        discount = self.get_object()
        discount.soft_delete()
        logger.info(f"Discount {discount.pk} retired by {request.user.username}")
        return Response({'message': 'Discount deleted successfully'})

    @action(detail=True, methods=['post'])
    def toggle(self, request, pk=None):
        """Enable or disable a discount"""
        discount = self.get_object()
        discount.is_active = not discount.is_active
        discount.save(update_fields=['is_active', 'updated_at'])
        logger.info(
            f"Discount {discount.pk} {'enabled' if discount.is_active else 'disabled'} "
            f"by {request.user.username}"
        )
        return Response(DiscountSerializer(discount).data)


def _optional_int(value, name):
    if value in (None, ''):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidPricingContext(f"{name} must be an integer")


@api_view(['GET'])
@permission_classes([AllowAny])
def price_quote(request):
    """
    Display price for a product/variant.

    Query params: product (required), variant, company, price (base price).
    """
    try:
        context = PricingContext(
            product_id=_optional_int(request.query_params.get('product'), 'product'),
            variant_id=_optional_int(request.query_params.get('variant'), 'variant'),
            company_id=_optional_int(request.query_params.get('company'), 'company'),
        )
        base_price = to_decimal(request.query_params.get('price', ''))
        if not base_price.is_finite() or base_price < 0:
            raise InvalidPricingContext("price must be a non-negative number")
        resolved = price_for_display(base_price, context)
    except InvalidPricingContext as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except ArithmeticError:
        return Response({'error': 'price must be a number'}, status=status.HTTP_400_BAD_REQUEST)

    data = resolved.as_dict()
    discount = resolved.applied_discount
    if discount is not None:
        data['discount'].update({
            'status': discount_status(discount),
            'time_remaining': format_time_remaining(discount.end_date),
            'ending_soon': is_ending_soon(discount),
        })
    return Response(data)
