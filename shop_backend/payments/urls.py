# payments/urls.py

from django.urls import path

from payments.views import CreatePaymentOrderView, SaveOrderView, VerifyPaymentView

app_name = "payments"

urlpatterns = [
    path("create-order/", CreatePaymentOrderView.as_view(), name="create-order"),
    path("verify-payment/", VerifyPaymentView.as_view(), name="verify-payment"),
    path("save-order/", SaveOrderView.as_view(), name="save-order"),
]
