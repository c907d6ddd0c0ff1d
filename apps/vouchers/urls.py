from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'vouchers'

router = DefaultRouter()
router.register(r'admin/transactions', views.AdminTransactionViewSet, basename='admin-transaction')

urlpatterns = [
    # GET    /api/voucher/{code}/         - Voucher with gift item and locations
    # POST   /api/voucher/{code}/redeem/  - Redeem at scanned location
    path('voucher/<str:code>/', views.voucher_detail, name='voucher-detail'),
    path('voucher/<str:code>/redeem/', views.voucher_redeem, name='voucher-redeem'),

    # Back-office payouts
    path('admin/payouts/', views.admin_payout_list, name='admin-payout-list'),
    path('admin/payouts/mark-paid/', views.admin_mark_payouts_paid, name='admin-payout-mark-paid'),

    path('', include(router.urls)),
]
