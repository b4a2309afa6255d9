from rest_framework import serializers

from .dtos import DiscountKind


class LineItemSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField(allow_blank=True)
    brand = serializers.CharField(allow_blank=True)
    category = serializers.CharField(allow_blank=True)
    unitPrice = serializers.CharField()
    imageUrl = serializers.CharField(allow_blank=True)
    stockCap = serializers.IntegerField(min_value=0)
    quantity = serializers.IntegerField(min_value=1)
    lineTotal = serializers.CharField()


class DiscountSerializer(serializers.Serializer):
    code = serializers.CharField()
    kind = serializers.ChoiceField(choices=[k.value for k in DiscountKind])
    value = serializers.CharField()
    description = serializers.CharField(allow_blank=True)
    maximumAmount = serializers.CharField(allow_null=True, required=False)


class FormattedTotalsSerializer(serializers.Serializer):
    subtotal = serializers.CharField()
    discountAmount = serializers.CharField()
    finalTotal = serializers.CharField()
    deliveryFee = serializers.CharField()
    orderTotal = serializers.CharField()


class CartTotalsSerializer(serializers.Serializer):
    totalItemCount = serializers.IntegerField()
    subtotal = serializers.CharField()
    discountAmount = serializers.CharField()
    finalTotal = serializers.CharField()
    deliveryFee = serializers.CharField()
    orderTotal = serializers.CharField()
    currency = serializers.CharField()
    formatted = FormattedTotalsSerializer()


class CartReadSerializer(serializers.Serializer):
    items = LineItemSerializer(many=True)
    discount = DiscountSerializer(allow_null=True)
    totals = CartTotalsSerializer()


class CartItemAddSerializer(serializers.Serializer):
    productId = serializers.CharField(required=False)
    product = serializers.DictField(required=False)
    quantity = serializers.IntegerField(required=False, default=1)

    def validate(self, attrs):
        if not attrs.get("product") and not attrs.get("productId"):
            raise serializers.ValidationError(
                "Either product or productId is required"
            )
        return attrs


class CartItemQuantitySerializer(serializers.Serializer):
    quantity = serializers.IntegerField()


class DiscountApplySerializer(serializers.Serializer):
    code = serializers.CharField(max_length=64)
