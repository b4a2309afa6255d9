from django.urls import path, re_path

from .views import CartDiscountView, CartItemDetailView, CartItemListView, CartView

urlpatterns = [
    path("", CartView.as_view(), name="api-cart"),
    path("items/", CartItemListView.as_view(), name="api-cart-items"),
    # optional trailing slash, ids are opaque catalog strings
    re_path(
        r"^items/(?P<item_id>[^/]+)/?$",
        CartItemDetailView.as_view(),
        name="api-cart-item-detail",
    ),
    path("discount/", CartDiscountView.as_view(), name="api-cart-discount"),
]
