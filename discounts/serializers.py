from decimal import Decimal

from django.db import transaction
from rest_framework import serializers

from products.models import Company, Product, ProductVariant
from .models import Discount
from .status import discount_status, format_time_remaining, is_ending_soon


class DiscountSerializer(serializers.ModelSerializer):
    """Serializer for reading and updating a single discount"""
    scope = serializers.ReadOnlyField()
    status = serializers.SerializerMethodField()
    time_remaining = serializers.SerializerMethodField()
    ending_soon = serializers.SerializerMethodField()
    company_name = serializers.SerializerMethodField()
    product_name = serializers.SerializerMethodField()
    variant_name = serializers.SerializerMethodField()

    class Meta:
        model = Discount
        fields = [
            'id', 'name', 'description', 'percentage', 'start_date', 'end_date',
            'is_active', 'company', 'company_name', 'product', 'product_name',
            'variant', 'variant_name', 'scope', 'status', 'time_remaining',
            'ending_soon', 'created_at', 'updated_at'
        ]
        read_only_fields = ['company', 'created_at', 'updated_at']

    def get_status(self, obj):
        return discount_status(obj)

    def get_time_remaining(self, obj):
        return format_time_remaining(obj.end_date)

    def get_ending_soon(self, obj):
        return is_ending_soon(obj)

    def get_company_name(self, obj):
        return obj.company.name if obj.company_id else None

    def get_product_name(self, obj):
        return obj.product.name if obj.product_id else None

    def get_variant_name(self, obj):
        return str(obj.variant) if obj.variant_id else None

    def validate(self, attrs):
        instance = self.instance
        start_date = attrs.get('start_date', getattr(instance, 'start_date', None))
        end_date = attrs.get('end_date', getattr(instance, 'end_date', None))
        if start_date and end_date and end_date <= start_date:
            raise serializers.ValidationError({'end_date': "End date must be after start date."})

        # Reassigning to a variant clears the product and vice versa
        if attrs.get('variant'):
            attrs['product'] = None
        elif attrs.get('product'):
            attrs['variant'] = None

        pointers = [
            getattr(instance, 'company_id', None),
            attrs['product'].pk if attrs.get('product') else (
                None if 'product' in attrs else getattr(instance, 'product_id', None)
            ),
            attrs['variant'].pk if attrs.get('variant') else (
                None if 'variant' in attrs else getattr(instance, 'variant_id', None)
            ),
        ]
        if sum(1 for pointer in pointers if pointer) != 1:
            raise serializers.ValidationError(
                "A discount applies to exactly one company, product, or variant."
            )
        return attrs


class DiscountCreateSerializer(serializers.Serializer):
    """
    Serializer for creating discounts.

    Supports a company-wide discount, one discount per selected product,
    or a single variant discount.
    """
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    percentage = serializers.DecimalField(
        max_digits=5, decimal_places=2,
        min_value=Decimal('0.01'), max_value=Decimal('100')
    )
    start_date = serializers.DateTimeField()
    end_date = serializers.DateTimeField()
    is_active = serializers.BooleanField(required=False, default=True)
    company_id = serializers.IntegerField(required=False, allow_null=True)
    product_ids = serializers.ListField(
        child=serializers.IntegerField(), required=False, allow_empty=True
    )
    variant_id = serializers.IntegerField(required=False, allow_null=True)
    apply_to_all_company_products = serializers.BooleanField(required=False, default=False)

    def validate(self, attrs):
        if attrs['end_date'] <= attrs['start_date']:
            raise serializers.ValidationError({'end_date': "End date must be after start date."})

        company_id = attrs.get('company_id')
        product_ids = attrs.get('product_ids') or []
        variant_id = attrs.get('variant_id')

        if company_id and attrs.get('apply_to_all_company_products'):
            if not Company.objects.filter(pk=company_id).exists():
                raise serializers.ValidationError({'company_id': "Company not found."})
            attrs['targets'] = [{'company_id': company_id}]
        elif product_ids:
            product_ids = list(dict.fromkeys(product_ids))
            found = Product.objects.filter(pk__in=product_ids).count()
            if found != len(product_ids):
                raise serializers.ValidationError({'product_ids': "One or more products not found."})
            attrs['targets'] = [{'product_id': product_id} for product_id in product_ids]
        elif variant_id:
            if not ProductVariant.objects.filter(pk=variant_id).exists():
                raise serializers.ValidationError({'variant_id': "Variant not found."})
            attrs['targets'] = [{'variant_id': variant_id}]
        else:
            raise serializers.ValidationError(
                "Please select a company, products, or variant for the discount."
            )
        return attrs

    def create(self, validated_data):
        targets = validated_data.pop('targets')
        for key in ('company_id', 'product_ids', 'variant_id', 'apply_to_all_company_products'):
            validated_data.pop(key, None)

        with transaction.atomic():
            return [Discount.objects.create(**validated_data, **target) for target in targets]
