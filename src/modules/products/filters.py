import django_filters

from modules.products.models import Product


class ProductFilter(django_filters.FilterSet):
    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    boutique = django_filters.UUIDFilter(field_name="boutique_id")
    min_price = django_filters.NumberFilter(field_name="price", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="price", lookup_expr="lte")
    status = django_filters.CharFilter(field_name="status", lookup_expr="iexact")
    on_promotion = django_filters.BooleanFilter(
        field_name="promo_price", lookup_expr="isnull", exclude=True
    )

    class Meta:
        model = Product
        fields = ["name", "boutique", "min_price", "max_price", "status", "on_promotion"]
