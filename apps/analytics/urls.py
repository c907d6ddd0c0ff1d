from django.urls import path
from . import views

app_name = 'analytics'

urlpatterns = [
    # GET /api/cafes/dashboard/    - Financial summary for the signed-in café
    # GET /api/cafes/transactions/ - Completed ledger entries, ?type=&page=&limit=
    path('cafes/dashboard/', views.cafe_dashboard, name='cafe-dashboard'),
    path('cafes/transactions/', views.CafeTransactionListView.as_view(), name='cafe-transactions'),
]
