from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'merchants'

# Router for ViewSets
router = DefaultRouter()
router.register(r'cafes/items', views.CafeGiftItemViewSet, basename='cafe-item')
router.register(r'admin/merchants', views.AdminMerchantViewSet, basename='admin-merchant')
router.register(r'admin/categories', views.AdminCategoryViewSet, basename='admin-category')
router.register(r'admin/locations', views.AdminLocationViewSet, basename='admin-location')
router.register(r'admin/gift-items', views.AdminGiftItemViewSet, basename='admin-gift-item')

urlpatterns = [
    # Café portal
    # POST   /api/cafes/login/            - Sign in, sets cafe-token cookie
    # POST   /api/cafes/logout/           - Sign out
    # POST   /api/cafes/change-password/  - Replace temporary password
    # GET    /api/cafes/profile/          - Merchant profile
    # PATCH  /api/cafes/profile/          - Update profile
    # POST   /api/cafes/signup/           - Apply to sell on Brontie
    # POST   /api/cafes/forgot-password/  - Email a reset link
    # GET    /api/cafes/verify-reset-token/ - Check a reset token
    # POST   /api/cafes/reset-password/   - Set a new password with a token
    path('cafes/login/', views.cafe_login, name='cafe-login'),
    path('cafes/logout/', views.cafe_logout, name='cafe-logout'),
    path('cafes/change-password/', views.cafe_change_password, name='cafe-change-password'),
    path('cafes/profile/', views.cafe_profile, name='cafe-profile'),
    path('cafes/signup/', views.cafe_signup, name='cafe-signup'),
    path('cafes/forgot-password/', views.cafe_forgot_password, name='cafe-forgot-password'),
    path('cafes/verify-reset-token/', views.cafe_verify_reset_token, name='cafe-verify-reset-token'),
    path('cafes/reset-password/', views.cafe_reset_password, name='cafe-reset-password'),

    # Storefront
    path('categories/', views.category_list, name='category-list'),
    path('gift-items/', views.gift_item_list, name='gift-item-list'),
    path('gift-items/<uuid:pk>/', views.gift_item_detail, name='gift-item-detail'),
    path('qr/validate/<str:short_id>/', views.qr_validate, name='qr-validate'),

    # Back-office QR codes
    path('admin/qr/generate/', views.admin_qr_generate, name='admin-qr-generate'),
    path('admin/qr/<str:short_id>/image/', views.admin_qr_image, name='admin-qr-image'),

    # Router URLs
    # GET/POST          /api/cafes/items/
    # GET/PATCH/DELETE  /api/cafes/items/{id}/
    # POST              /api/admin/merchants/{id}/approve/
    # POST              /api/admin/merchants/{id}/deny/
    # POST              /api/admin/merchants/{id}/brontie-fee/
    path('', include(router.urls)),
]
