from django import forms

from .models import Discount


class DiscountForm(forms.ModelForm):
    """Form for creating and editing discounts"""

    class Meta:
        model = Discount
        fields = [
            'name', 'description', 'percentage', 'company', 'product', 'variant',
            'start_date', 'end_date', 'is_active',
        ]
        widgets = {
            'description': forms.Textarea(attrs={'rows': 3}),
            'percentage': forms.NumberInput(attrs={'step': '0.01', 'min': '0.01', 'max': '100'}),
            'start_date': forms.DateTimeInput(attrs={'type': 'datetime-local'}),
            'end_date': forms.DateTimeInput(attrs={'type': 'datetime-local'}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # Only one scope is filled in per discount
        for field_name in ('company', 'product', 'variant'):
            self.fields[field_name].required = False
        self.fields['company'].queryset = self.fields['company'].queryset.order_by('name')
        self.fields['product'].queryset = self.fields['product'].queryset.order_by('name')
        self.fields['variant'].queryset = (
            self.fields['variant'].queryset.select_related('product').order_by('product__name', 'sku')
        )
