from django.urls import path
from .views import (
    AdminPaymentListView,
    PaymentView,
    PaystackPaymentView,
    PaystackVerifyView,
    VerifyBankTransferView,
)

urlpatterns = [
    path("", PaymentView.as_view(), name="payments"),
    path("verify/", VerifyBankTransferView.as_view(), name="payments-verify"),
    path("admin/", AdminPaymentListView.as_view(), name="payments-admin"),
    path("paystack/", PaystackPaymentView.as_view(), name="paystack-payment"),
    path("paystack/verify/", PaystackVerifyView.as_view(), name="paystack-verify"),
]
