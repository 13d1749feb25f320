from django.urls import path

from .views import (
    AnalyticsView,
    BusinessLoginView,
    BusinessProfileView,
    BusinessQRLoginView,
    BusinessSearchView,
    BusinessSettingsView,
    BusinessSignupView,
    CustomerCardView,
    CustomerJoinView,
    CustomerLeaveView,
    CustomerLoginView,
    CustomerProfileView,
    CustomerSetupView,
    CustomerSignupView,
    CustomerStateView,
    DiscountListView,
    LogoutView,
    MembersView,
    ProvisionalCustomerView,
    QRImageView,
    ScanView,
)

app_name = "qroyal"

urlpatterns = [
    # Business terminal
    path("business/signup/", BusinessSignupView.as_view(), name="business-signup"),
    path("business/login/", BusinessLoginView.as_view(), name="business-login"),
    path("business/login/qr/", BusinessQRLoginView.as_view(), name="business-login-qr"),
    path("business/logout/", LogoutView.as_view(), name="business-logout"),
    path("business/scan/", ScanView.as_view(), name="business-scan"),
    path("business/settings/", BusinessSettingsView.as_view(), name="business-settings"),
    path("business/analytics/", AnalyticsView.as_view(), name="business-analytics"),
    path("business/members/", MembersView.as_view(), name="business-members"),
    path("business/customers/new/", ProvisionalCustomerView.as_view(), name="business-new-customer"),
    # Customer device
    path("customer/", CustomerCardView.as_view(), name="customer"),
    path("customer/signup/", CustomerSignupView.as_view(), name="customer-signup"),
    path("customer/login/", CustomerLoginView.as_view(), name="customer-login"),
    path("customer/logout/", LogoutView.as_view(), name="customer-logout"),
    path("customer/state/", CustomerStateView.as_view(), name="customer-state"),
    path("customer/setup/", CustomerSetupView.as_view(), name="customer-setup"),
    path("customer/join/", CustomerJoinView.as_view(), name="customer-join"),
    path("customer/leave/", CustomerLeaveView.as_view(), name="customer-leave"),
    path("customer/profile/", CustomerProfileView.as_view(), name="customer-profile"),
    # Public
    path("businesses/", BusinessSearchView.as_view(), name="businesses"),
    path("businesses/<int:business_id>/", BusinessProfileView.as_view(), name="business-profile"),
    path("discounts/", DiscountListView.as_view(), name="discounts"),
    path("qr/<str:token>.png", QRImageView.as_view(), name="qr-image"),
]
