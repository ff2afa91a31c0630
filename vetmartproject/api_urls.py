"""
API URL Configuration for VetMart
Centralized routing for all API endpoints
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

# Import ViewSets
from products.api_views import (
    CompanyViewSet,
    ProductViewSet,
    ProductVariantViewSet,
)
from discounts.api_views import DiscountViewSet, price_quote

# Create router
router = DefaultRouter()

# Register catalog routes
router.register(r'companies', CompanyViewSet, basename='company')
router.register(r'products', ProductViewSet, basename='product')
router.register(r'variants', ProductVariantViewSet, basename='variant')

# Register discount routes
router.register(r'discounts', DiscountViewSet, basename='discount')

urlpatterns = [
    # Pricing API
    path('pricing/quote/', price_quote, name='price_quote'),

    # Include router URLs
    path('', include(router.urls)),
]
