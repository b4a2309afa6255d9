from rest_framework import serializers

from .filters import SORT_CHOICES


class FilterStateSerializer(serializers.Serializer):
    protectionType = serializers.CharField()
    industry = serializers.CharField()
    search = serializers.CharField(allow_blank=True)
    minPrice = serializers.CharField(allow_blank=True)
    maxPrice = serializers.CharField(allow_blank=True)
    sort = serializers.ChoiceField(choices=SORT_CHOICES)
    inStock = serializers.BooleanField()
    featured = serializers.BooleanField()
    onSale = serializers.BooleanField()
    page = serializers.IntegerField(min_value=1)


class CanonicalFiltersSerializer(serializers.Serializer):
    filters = FilterStateSerializer()
    query = serializers.DictField(child=serializers.CharField())
    queryString = serializers.CharField(allow_blank=True)
    hasActiveFilters = serializers.BooleanField()


class ProductListingSerializer(CanonicalFiltersSerializer):
    # catalog records are passed through untouched
    products = serializers.ListField(child=serializers.JSONField())
    total = serializers.IntegerField(allow_null=True, required=False)
    page = serializers.IntegerField(required=False)
    pages = serializers.IntegerField(allow_null=True, required=False)
