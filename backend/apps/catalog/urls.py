from django.urls import path

from .views import ProductDetailView, ProductFilterView, ProductListView

urlpatterns = [
    path("", ProductListView.as_view(), name="api-products-list"),
    path("filters/", ProductFilterView.as_view(), name="api-products-filters"),
    path("<str:product_id>/", ProductDetailView.as_view(), name="api-products-detail"),
]
