from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework import status
from rest_framework.views import APIView

from apps.api.schemas import ErrorResponseSerializer
from apps.api.utils import error_response
from apps.catalog.container import build_catalog_client
from apps.common import get_logger

from .container import build_cart_service, build_discount_resolver
from .serializers import (
    CartItemAddSerializer,
    CartItemQuantitySerializer,
    CartReadSerializer,
    DiscountApplySerializer,
)

logger = get_logger(__name__).bind(component="carts", layer="view")

ITEM_ID_PARAMETER = OpenApiParameter("item_id", str, OpenApiParameter.PATH)


class CartServiceMixin:
    resolver = build_discount_resolver()
    catalog = build_catalog_client()

    def get_service(self, request):
        return build_cart_service(request, resolver=self.resolver, products=self.catalog)


@extend_schema(tags=["Cart"])
class CartView(CartServiceMixin, APIView):
    permission_classes = [AllowAny]
    log = logger.bind(view="CartView")

    @extend_schema(
        operation_id="cart_retrieve",
        summary="Get cart",
        description="Returns the visitor's cart lines, active discount and derived totals.",
        responses={200: CartReadSerializer},
    )
    def get(self, request):
        data = self.get_service(request).get_cart()
        return Response(CartReadSerializer(data).data)

    @extend_schema(
        operation_id="cart_clear",
        summary="Clear cart",
        description="Removes every line and the active discount.",
        responses={200: CartReadSerializer},
    )
    def delete(self, request):
        self.log.info("Clearing cart via API")
        data = self.get_service(request).clear_cart()
        return Response(CartReadSerializer(data).data)


@extend_schema(tags=["Cart"])
class CartItemListView(CartServiceMixin, APIView):
    permission_classes = [AllowAny]
    log = logger.bind(view="CartItemListView")

    @extend_schema(
        operation_id="cart_items_create",
        summary="Add item",
        description=(
            "Adds a product to the cart, or increments its quantity if already present. "
            "Pass the catalog record inline as `product`, or a `productId`. Either way the "
            "product is looked up in the catalog, which supplies the price and stock. "
            "Quantities are clamped to available stock; non-positive quantities count as 1."
        ),
        request=CartItemAddSerializer,
        responses={
            200: CartReadSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            404: OpenApiResponse(response=ErrorResponseSerializer),
            409: OpenApiResponse(response=ErrorResponseSerializer),
            503: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request):
        serializer = CartItemAddSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data, error = self.get_service(request).add_item(dict(serializer.validated_data))
        if error:
            code, message, details = error
            self.log.info("Add to cart rejected", code=code)
            return error_response(code, message, details)
        return Response(CartReadSerializer(data).data, status=status.HTTP_200_OK)


@extend_schema(tags=["Cart"])
class CartItemDetailView(CartServiceMixin, APIView):
    permission_classes = [AllowAny]
    log = logger.bind(view="CartItemDetailView")

    @extend_schema(
        operation_id="cart_items_partial_update",
        summary="Set item quantity",
        description="Quantities above stock are clamped; zero or less removes the line.",
        parameters=[ITEM_ID_PARAMETER],
        request=CartItemQuantitySerializer,
        responses={
            200: CartReadSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def patch(self, request, item_id: str):
        serializer = CartItemQuantitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data, error = self.get_service(request).update_quantity(
            item_id, dict(serializer.validated_data)
        )
        if error:
            code, message, details = error
            return error_response(code, message, details)
        return Response(CartReadSerializer(data).data)

    @extend_schema(
        operation_id="cart_items_destroy",
        summary="Remove item",
        parameters=[ITEM_ID_PARAMETER],
        responses={
            200: CartReadSerializer,
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def delete(self, request, item_id: str):
        data, error = self.get_service(request).remove_item(item_id)
        if error:
            code, message, details = error
            return error_response(code, message, details)
        return Response(CartReadSerializer(data).data)


@extend_schema(tags=["Cart"])
class CartDiscountView(CartServiceMixin, APIView):
    permission_classes = [AllowAny]
    log = logger.bind(view="CartDiscountView")

    @extend_schema(
        operation_id="cart_discount_apply",
        summary="Apply discount code",
        description=(
            "Replaces any active discount. Codes are matched case-insensitively. "
            "Rejected when the cart is empty or below the code's minimum order amount."
        ),
        request=DiscountApplySerializer,
        responses={
            200: CartReadSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request):
        serializer = DiscountApplySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data, error = self.get_service(request).apply_code(dict(serializer.validated_data))
        if error:
            code, message, details = error
            return error_response(code, message, details)
        self.log.info("Discount applied via API", code=data["discount"]["code"])
        return Response(CartReadSerializer(data).data)

    @extend_schema(
        operation_id="cart_discount_remove",
        summary="Remove discount",
        responses={200: CartReadSerializer},
    )
    def delete(self, request):
        data = self.get_service(request).remove_discount()
        return Response(CartReadSerializer(data).data)
