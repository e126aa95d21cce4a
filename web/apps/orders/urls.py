from django.urls import path
from .views import OrdersCollectionView, OrderDetailView
app_name = "orders"

urlpatterns = [
    path("", OrdersCollectionView.as_view(), name="orders-collection"),  # GET list / POST create
    path("<int:oid>/", OrderDetailView.as_view(), name="orders-detail"),  # GET / DELETE
]
