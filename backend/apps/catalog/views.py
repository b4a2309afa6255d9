from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.api.schemas import ErrorResponseSerializer
from apps.api.utils import error_response
from apps.common import get_logger

from .container import build_product_query_service
from .filters import SORT_CHOICES
from .serializers import CanonicalFiltersSerializer, ProductListingSerializer

logger = get_logger(__name__).bind(component="catalog", layer="view")

FILTER_PARAMETERS = [
    OpenApiParameter("protectionType", str, description="Protection type category id, or 'all'"),
    OpenApiParameter("industry", str, description="Industry category id, or 'all'"),
    OpenApiParameter("search", str, description="Free-text search"),
    OpenApiParameter("minPrice", str, description="Minimum price in KES"),
    OpenApiParameter("maxPrice", str, description="Maximum price in KES"),
    OpenApiParameter("sort", str, enum=list(SORT_CHOICES)),
    OpenApiParameter("inStock", bool),
    OpenApiParameter("featured", bool),
    OpenApiParameter("onSale", bool),
    OpenApiParameter("page", int),
]


@extend_schema(tags=["Catalog"])
class ProductListView(APIView):
    permission_classes = [AllowAny]
    service = build_product_query_service()
    log = logger.bind(view="ProductListView")

    @extend_schema(
        operation_id="products_list",
        summary="List products",
        description=(
            "Proxies the catalog listing. Unknown or default-valued filters are dropped "
            "and the canonical query string is returned alongside the products."
        ),
        parameters=FILTER_PARAMETERS,
        responses={
            200: ProductListingSerializer,
            503: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def get(self, request):
        self.log.debug("Handling product list request", query=request.query_params.urlencode())
        payload, error = self.service.list_products(request.query_params)
        if error:
            code, message, details = error
            return error_response(code, message, details)
        return Response(payload)


@extend_schema(tags=["Catalog"])
class ProductFilterView(APIView):
    permission_classes = [AllowAny]
    service = build_product_query_service()

    @extend_schema(
        operation_id="products_filters",
        summary="Canonicalize listing filters",
        description="Returns the parsed filter state and the minimal shareable query string.",
        parameters=FILTER_PARAMETERS,
        responses={200: CanonicalFiltersSerializer},
    )
    def get(self, request):
        data = self.service.canonical_filters(request.query_params)
        return Response(CanonicalFiltersSerializer(data).data)


@extend_schema(tags=["Catalog"])
class ProductDetailView(APIView):
    permission_classes = [AllowAny]
    service = build_product_query_service()
    log = logger.bind(view="ProductDetailView")

    @extend_schema(
        operation_id="products_retrieve",
        summary="Get product",
        parameters=[OpenApiParameter("product_id", str, OpenApiParameter.PATH)],
        responses={
            200: OpenApiResponse(description="Catalog product record"),
            404: OpenApiResponse(response=ErrorResponseSerializer),
            503: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def get(self, request, product_id: str):
        self.log.debug("Fetching product detail", product_id=product_id)
        record, error = self.service.get_product(product_id)
        if error:
            code, message, details = error
            return error_response(code, message, details)
        return Response(record)
