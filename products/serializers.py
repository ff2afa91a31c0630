from rest_framework import serializers

from discounts.repository import DjangoDiscountRepository
from discounts.status import discount_status
from .models import Company, Product, ProductVariant
from .pricing import get_effective_price


class CompanySerializer(serializers.ModelSerializer):
    """Serializer for Company model"""

    class Meta:
        model = Company
        fields = ['id', 'name', 'slug', 'email', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['slug', 'created_at', 'updated_at']


class ProductVariantSerializer(serializers.ModelSerializer):
    """Serializer for ProductVariant model, with its current display price"""
    pricing = serializers.SerializerMethodField()

    class Meta:
        model = ProductVariant
        fields = [
            'id', 'product', 'sku', 'packing_volume', 'customer_price',
            'company_price', 'stock', 'is_active', 'pricing',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def get_pricing(self, obj):
        wholesale = self.context.get('wholesale', False)
        return get_effective_price(obj, wholesale=wholesale).as_dict()


class ProductListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for product list views"""
    company_name = serializers.SerializerMethodField()
    price_range = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'slug', 'sku', 'company', 'company_name',
            'category', 'is_active', 'price_range'
        ]
        read_only_fields = ['slug']

    def get_company_name(self, obj):
        return obj.company.name if obj.company_id else None

    def get_price_range(self, obj):
        min_price, max_price = obj.get_price_range()
        if min_price is not None:
            return {
                'min': str(min_price),
                'max': str(max_price)
            }
        return None


class ProductDetailSerializer(ProductListSerializer):
    """Full serializer for product detail views, including live discounts"""
    variants = serializers.SerializerMethodField()
    discounts = serializers.SerializerMethodField()

    class Meta(ProductListSerializer.Meta):
        fields = ProductListSerializer.Meta.fields + [
            'description', 'is_available', 'variants', 'discounts',
            'created_at', 'updated_at'
        ]

    def get_variants(self, obj):
        variants = obj.variants.filter(is_active=True).select_related('product')
        return ProductVariantSerializer(variants, many=True, context=self.context).data

    def get_discounts(self, obj):
        discounts = DjangoDiscountRepository().active_for_product(obj.pk, obj.company_id)
        return [
            {
                'id': discount.pk,
                'name': discount.name,
                'percentage': str(discount.percentage),
                'scope': discount.scope,
                'variant': discount.variant_id,
                'status': discount_status(discount),
                'start_date': discount.start_date.isoformat(),
                'end_date': discount.end_date.isoformat(),
            }
            for discount in discounts
        ]
