from django.contrib import admin, messages
from django.utils import timezone

from .forms import DiscountForm
from .models import Discount
from .status import ACTIVE, STATUS_CHOICES, discount_status, format_time_remaining


class DiscountStatusFilter(admin.SimpleListFilter):
    """Filter on the computed status"""
    title = 'status'
    parameter_name = 'status'

    def lookups(self, request, model_admin):
        return STATUS_CHOICES

    def queryset(self, request, queryset):
        if self.value():
            return queryset.with_status(self.value(), timezone.now())
        return queryset


@admin.register(Discount)
class DiscountAdmin(admin.ModelAdmin):
    """
    Admin interface for discount management.
    Deleting a discount retires it instead of removing the row.
    """
    form = DiscountForm
    list_display = (
        'name', 'percentage_display', 'scope_display', 'status_display',
        'start_date', 'end_date', 'is_active', 'created_at'
    )
    list_filter = (DiscountStatusFilter, 'is_active', 'start_date', 'end_date', 'company')
    search_fields = ('name', 'description', 'product__name', 'variant__sku', 'company__name')
    list_select_related = ('company', 'product', 'variant__product')
    readonly_fields = ('created_at', 'updated_at', 'deleted_at')
    actions = ['enable_discounts', 'disable_discounts']

    fieldsets = (
        ('Basic Information', {
            'fields': ('name', 'description', 'percentage', 'is_active')
        }),
        ('Scope', {
            'fields': ('company', 'product', 'variant'),
            'description': 'Choose exactly one: a company, a product, or a single variant.'
        }),
        ('Validity Period', {
            'fields': ('start_date', 'end_date'),
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at', 'deleted_at'),
            'classes': ('collapse',)
        }),
    )

    def get_queryset(self, request):
        return super().get_queryset(request).alive()

    def percentage_display(self, obj):
        return f"{obj.percentage}%"
    percentage_display.short_description = 'Discount'
    percentage_display.admin_order_field = 'percentage'

    def scope_display(self, obj):
        if obj.variant_id:
            return f"Variant: {obj.variant}"
        if obj.product_id:
            return f"Product: {obj.product}"
        if obj.company_id:
            return f"Company: {obj.company}"
        return '-'
    scope_display.short_description = 'Applies to'

    def status_display(self, obj):
        status = discount_status(obj)
        if status == ACTIVE:
            return f"Active ({format_time_remaining(obj.end_date)})"
        return status.capitalize()
    status_display.short_description = 'Status'

    @admin.action(description='Enable selected discounts')
    def enable_discounts(self, request, queryset):
        updated = queryset.update(is_active=True)
        self.message_user(request, f"{updated} discount(s) enabled.", messages.SUCCESS)

    @admin.action(description='Disable selected discounts')
    def disable_discounts(self, request, queryset):
        updated = queryset.update(is_active=False)
        self.message_user(request, f"{updated} discount(s) disabled.", messages.SUCCESS)

    def delete_model(self, request, obj):
        obj.soft_delete()

    def delete_queryset(self, request, queryset):
        queryset.update(is_active=False, deleted_at=timezone.now())
