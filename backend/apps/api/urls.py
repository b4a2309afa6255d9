from django.urls import include, path

urlpatterns = [
    path("products/", include("apps.catalog.urls")),
    path("cart/", include("apps.carts.urls")),
]
