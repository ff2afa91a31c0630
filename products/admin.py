from django.contrib import admin
from .models import Company, Product, ProductVariant


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    """
    Customizes the Company display in the admin panel.
    """
    list_display = ('name', 'slug', 'email', 'is_active')
    list_filter = ('is_active',)
    search_fields = ('name', 'email')
    prepopulated_fields = {'slug': ('name',)}


@admin.register(ProductVariant)
class ProductVariantAdmin(admin.ModelAdmin):
    """
    Customizes the ProductVariant display in the admin panel.
    """
    list_display = ('sku', 'product', 'packing_volume', 'customer_price', 'company_price', 'stock', 'is_active')
    list_filter = ('is_active', 'product__company')
    search_fields = ('sku', 'product__name')


class ProductVariantInline(admin.TabularInline):
    """
    Allows editing ProductVariants directly within the Product admin page.
    """
    model = ProductVariant
    extra = 1
    show_change_link = True


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    """
    Customizes the Product display in the admin panel.
    """
    list_display = ('name', 'sku', 'company', 'category', 'is_active')
    list_filter = ('is_active', 'company')
    search_fields = ('name', 'sku', 'company__name')
    prepopulated_fields = {'slug': ('name',)}
    inlines = [ProductVariantInline]
