from rest_framework import viewsets, filters
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticatedOrReadOnly
from django.conf import settings
from django_filters.rest_framework import DjangoFilterBackend
from .models import Company, Product, ProductVariant
from .serializers import (
    CompanySerializer,
    ProductListSerializer,
    ProductDetailSerializer,
    ProductVariantSerializer,
)


def _can_see_wholesale(user):
    if not user.is_authenticated:
        return False
    group = getattr(settings, 'WHOLESALE_PRICING_GROUP', 'Partners')
    return user.is_staff or user.groups.filter(name=group).exists()


def _wholesale_requested(request):
    """Wholesale prices are only shown to staff and partner accounts"""
    if request.query_params.get('wholesale', '').lower() not in ('1', 'true', 'yes'):
        return False
    return _can_see_wholesale(request.user)


class CompanyViewSet(viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for viewing companies.
    """
    queryset = Company.objects.filter(is_active=True)
    serializer_class = CompanySerializer
    lookup_field = 'slug'


class ProductViewSet(viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for viewing products.
    List and retrieve with filtering, searching, and ordering.
    """
    queryset = Product.objects.filter(is_active=True).select_related('company')
    permission_classes = [IsAuthenticatedOrReadOnly]
    lookup_field = 'slug'
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['company', 'category']
    search_fields = ['name', 'description', 'sku']
    ordering_fields = ['created_at', 'name']
    ordering = ['-created_at']

    def get_serializer_class(self):
        if self.action == 'retrieve':
            return ProductDetailSerializer
        return ProductListSerializer

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['wholesale'] = _wholesale_requested(self.request)
        return context

    @action(detail=True, methods=['get'])
    def variants(self, request, slug=None):
        """Get all variants for this product, with display prices"""
        product = self.get_object()
        variants = product.variants.filter(is_active=True).select_related('product')
        serializer = ProductVariantSerializer(variants, many=True, context=self.get_serializer_context())
        return Response(serializer.data)


class ProductVariantViewSet(viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for viewing product variants.
    """
    queryset = ProductVariant.objects.filter(is_active=True).select_related('product')
    serializer_class = ProductVariantSerializer
    permission_classes = [IsAuthenticatedOrReadOnly]
    filterset_fields = ['product']

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['wholesale'] = _wholesale_requested(self.request)
        return context
